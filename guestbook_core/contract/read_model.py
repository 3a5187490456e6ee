"""
Read Model: the read-side datasets the UI renders from.

The core never mutates contract data; it only re-requests it. A dataset
whose fetch fails keeps its previous value and the failure is logged.
"""

import logging
from typing import Awaitable, Callable, Dict, List, Optional

from guestbook_core.contract.gateway import ContractGateway
from guestbook_core.errors import ReadError
from guestbook_core.models.contract import ContractSnapshot, Message, Todo

logger = logging.getLogger(__name__)

DATASETS = ("messages", "all_todos", "user_todos", "balance", "todo_fee")


class ReadModel:
    """Cached view of contract state for one UI session."""

    def __init__(
        self,
        gateway: ContractGateway,
        account_provider: Callable[[], Optional[str]],
    ):
        self.gateway = gateway
        self.account_provider = account_provider

        self.messages: List[Message] = []
        self.all_todos: List[Todo] = []
        self.user_todos: List[Todo] = []
        self.balance: int = 0
        self.todo_fee: Optional[int] = None
        self.refresh_count = 0

    @property
    def has_access_pass(self) -> bool:
        return self.balance > 0

    def todos_for(self, view: str) -> List[Todo]:
        """Todos for the 'all' or 'mine' tab."""
        if view == "mine":
            return list(self.user_todos)
        if view == "all":
            return list(self.all_todos)
        raise ValueError(f"Unknown todo view: {view!r}")

    def snapshot(self) -> ContractSnapshot:
        return ContractSnapshot(messages=list(self.messages), todos=list(self.all_todos))

    async def refresh(self) -> Dict[str, bool]:
        """
        Re-request every dataset once.
        Returns which datasets refreshed successfully.
        """
        self.refresh_count += 1
        account = self.account_provider()
        results: Dict[str, bool] = {}

        results["messages"] = await self._load(
            "messages", self.gateway.read_all_messages
        )
        results["all_todos"] = await self._load(
            "all_todos", self.gateway.read_all_todos
        )
        results["todo_fee"] = await self._load(
            "todo_fee", self.gateway.read_todo_creation_fee
        )

        if account:
            results["user_todos"] = await self._load(
                "user_todos", lambda: self.gateway.read_user_todos(account)
            )
            results["balance"] = await self._load(
                "balance", lambda: self.gateway.read_access_pass_balance(account)
            )
        else:
            self.user_todos = []
            self.balance = 0
            results["user_todos"] = True
            results["balance"] = True

        return results

    async def _load(self, name: str, fetch: Callable[[], Awaitable[object]]) -> bool:
        try:
            value = await self._fetch(name, fetch)
        except ReadError as e:
            logger.warning("Keeping previous %s: %s", name, e)
            return False
        setattr(self, name, value)
        return True

    @staticmethod
    async def _fetch(name: str, fetch: Callable[[], Awaitable[object]]) -> object:
        try:
            return await fetch()
        except Exception as e:
            raise ReadError(f"Failed to read {name}: {e}") from e


async def fetch_snapshot(gateway: ContractGateway) -> ContractSnapshot:
    """Fetch messages and todos fresh. Raises ReadError on any failure."""
    try:
        messages = await gateway.read_all_messages()
        todos = await gateway.read_all_todos()
    except Exception as e:
        raise ReadError(f"Failed to read contract snapshot: {e}") from e
    return ContractSnapshot(messages=messages, todos=todos)
