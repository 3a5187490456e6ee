"""
Guestbook Session: wires the components for one UI session.

  EmbeddedContextDetector → IdentityReconciler   (identity)
  wallet account → ReadModel + TransactionOrchestrator   (chain)

Identity and wallet are independent: the orchestrator only needs the
connected wallet address.
"""

from typing import Optional

from guestbook_core.contract.gateway import ContractGateway
from guestbook_core.contract.read_model import ReadModel
from guestbook_core.embedded.detector import EmbeddedContextDetector, HostBridge
from guestbook_core.identity.reconciler import IdentityReconciler
from guestbook_core.identity.store import IdentityStore
from guestbook_core.models.config import GuestbookConfig
from guestbook_core.transactions.orchestrator import TransactionOrchestrator


class GuestbookSession:
    """One user's session. Remount (construct a new one) to re-run detection."""

    def __init__(
        self,
        gateway: ContractGateway,
        config: Optional[GuestbookConfig] = None,
        host: Optional[HostBridge] = None,
        store: Optional[IdentityStore] = None,
    ):
        self.config = config or GuestbookConfig()
        self.gateway = gateway
        self.wallet_address: Optional[str] = None

        self.detector = EmbeddedContextDetector(host) if host is not None else None
        self.store = store or IdentityStore(
            db_path=self.config.identity_db_path,
            key=self.config.identity_storage_key,
        )
        self.identity = IdentityReconciler(self.store, self.detector)
        self.read_model = ReadModel(gateway, lambda: self.wallet_address)
        self.transactions = TransactionOrchestrator(
            gateway,
            lambda: self.wallet_address,
            config=self.config,
            read_model=self.read_model,
        )

    async def start(self) -> None:
        """Load persisted identity first, then run the host handshake."""
        self.identity.start()
        if self.detector is not None:
            await self.detector.initialize()
        await self.read_model.refresh()

    async def connect_wallet(self, address: str) -> None:
        self.wallet_address = address
        await self.read_model.refresh()

    async def disconnect_wallet(self) -> None:
        self.wallet_address = None
        await self.read_model.refresh()
