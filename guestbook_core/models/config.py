"""Application configuration."""

from typing import Dict

from pydantic import BaseModel, Field

CELO_MAINNET = 42220
CELO_ALFAJORES = 44787
BASE_MAINNET = 8453

DEFAULT_APP_URL = "https://guestbook-app-ruddy.vercel.app"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class FieldLimits(BaseModel):
    """Maximum input lengths accepted by the app forms."""

    name: int = 50
    message: int = 280
    todo_title: int = 100
    todo_description: int = 500


class GuestbookConfig(BaseModel):
    """Configuration shared by the orchestrator, reconciler and frame server."""

    chain_id: int = CELO_MAINNET
    contract_addresses: Dict[int, str] = {
        CELO_MAINNET: ZERO_ADDRESS,
        CELO_ALFAJORES: ZERO_ADDRESS,
        BASE_MAINNET: ZERO_ADDRESS,
    }
    app_url: str = DEFAULT_APP_URL

    mint_fee_wei: int = 10**16              # 0.01 native unit
    message_fee_wei: int = 10**15           # 0.001 native unit
    limits: FieldLimits = FieldLimits()

    # Best-effort wait for the node/indexer before refetching; not a
    # read-after-write guarantee.
    refresh_delay_seconds: float = Field(default=2.0, ge=0.0)

    frame_latest_count: int = Field(default=3, ge=1)
    frame_truncate_length: int = Field(default=100, ge=1)
    truncation_marker: str = "..."

    identity_db_path: str = ":memory:"
    identity_storage_key: str = "farcasterUser"
    log_level: str = "INFO"

    @property
    def contract_address(self) -> str:
        """Contract for the active chain, falling back to Celo mainnet."""
        return self.contract_addresses.get(
            self.chain_id, self.contract_addresses.get(CELO_MAINNET, ZERO_ADDRESS)
        )
