"""
Contract Gateway: the narrow capability set the core needs from the chain.

The guestbook contract itself is an external collaborator. The core talks
to it only through ContractGateway. InMemoryGuestBook reproduces the
contract's rules in-process for local runs and tests; a network-bound
gateway would wrap an RPC client with the same method set.
"""

from __future__ import annotations

import asyncio
import hashlib
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Set, Tuple

from guestbook_core.errors import SubmissionError
from guestbook_core.models.contract import Message, Todo
from guestbook_core.models.transaction import Operation, TransactionRequest


class ContractGateway(Protocol):
    """Protocol for contract access: pluggable backend."""

    async def read_all_messages(self) -> List[Message]: ...

    async def read_all_todos(self) -> List[Todo]: ...

    async def read_user_todos(self, address: str) -> List[Todo]: ...

    async def read_access_pass_balance(self, address: str) -> int: ...

    async def read_todo_creation_fee(self) -> int: ...

    async def submit(self, request: TransactionRequest, sender: str) -> str: ...

    async def await_confirmation(self, tx_hash: str) -> bool: ...


class ContractRevert(Exception):
    """The contract rejected a call."""
    pass


@dataclass
class _StoredTodo:
    todo: Todo
    exists: bool = True
    liked_by: Set[str] = field(default_factory=set)


class InMemoryGuestBook:
    """
    In-process guestbook contract.

    Submissions are queued and only applied when confirmed, so reads
    between submit and confirmation still see the old state, the same
    as on a real chain.
    """

    def __init__(
        self,
        mint_fee: int = 10**16,
        message_fee: int = 10**15,
        todo_fee: int = 10**15,
        start_time: Optional[int] = None,
    ):
        self.mint_fee = mint_fee
        self.message_fee = message_fee
        self.todo_fee = todo_fee

        self._messages: List[Message] = []
        self._todos: List[_StoredTodo] = []
        self._balances: Dict[str, int] = {}
        self._pending: Dict[str, Tuple[TransactionRequest, str]] = {}
        self._clock = start_time if start_time is not None else int(time.time())
        self._nonce = 0

        # Failure injection
        self.reject_signatures = False
        self.fail_confirmations = False
        self.fail_reads = False
        self.confirmation_gate: Optional[asyncio.Event] = None

        self.submitted: List[TransactionRequest] = []
        self.read_calls: Dict[str, int] = {}

    # --- Reads ---

    async def read_all_messages(self) -> List[Message]:
        self._record_read("messages")
        return [m.model_copy() for m in self._messages]

    async def read_all_todos(self) -> List[Todo]:
        self._record_read("all_todos")
        return [s.todo.model_copy() for s in self._todos if s.exists]

    async def read_user_todos(self, address: str) -> List[Todo]:
        self._record_read("user_todos")
        owner = address.lower()
        return [
            s.todo.model_copy() for s in self._todos
            if s.exists and s.todo.creator.lower() == owner
        ]

    async def read_access_pass_balance(self, address: str) -> int:
        self._record_read("balance")
        return self._balances.get(address.lower(), 0)

    async def read_todo_creation_fee(self) -> int:
        self._record_read("todo_fee")
        return self.todo_fee

    # --- Writes ---

    async def submit(self, request: TransactionRequest, sender: str) -> str:
        """Sign and broadcast. Returns the transaction hash."""
        if self.reject_signatures:
            raise SubmissionError("User rejected the request")

        self._nonce += 1
        tx_hash = "0x" + hashlib.sha256(
            f"{sender}:{self._nonce}:{request.operation.value}".encode()
        ).hexdigest()
        self._pending[tx_hash] = (request, sender)
        self.submitted.append(request)
        return tx_hash

    async def await_confirmation(self, tx_hash: str) -> bool:
        """Wait for inclusion. False means the transaction reverted."""
        if self.confirmation_gate is not None:
            await self.confirmation_gate.wait()

        request, sender = self._pending.pop(tx_hash)
        if self.fail_confirmations:
            return False
        try:
            self._apply(request, sender)
        except ContractRevert:
            return False
        return True

    # --- Contract rules ---

    def _apply(self, request: TransactionRequest, sender: str) -> None:
        self._clock += 1
        op = request.operation
        sender_key = sender.lower()

        if op == Operation.MINT:
            self._require(request.value >= self.mint_fee, "Insufficient mint fee")
            self._balances[sender_key] = self._balances.get(sender_key, 0) + 1

        elif op == Operation.POST_MESSAGE:
            name, message = request.args
            self._require(request.value >= self.message_fee, "Insufficient message fee")
            self._require(self._balances.get(sender_key, 0) > 0, "Access pass required")
            self._messages.append(Message(
                sender=sender, message=str(message), name=str(name), timestamp=self._clock,
            ))

        elif op == Operation.CREATE_TODO:
            title, description = request.args
            self._require(request.value >= self.todo_fee, "Insufficient todo fee")
            self._todos.append(_StoredTodo(todo=Todo(
                id=len(self._todos),
                creator=sender,
                title=str(title),
                description=str(description),
                timestamp=self._clock,
            )))

        elif op == Operation.TOGGLE_TODO:
            stored = self._owned_todo(request, sender_key)
            stored.todo.completed = not stored.todo.completed

        elif op == Operation.DELETE_TODO:
            stored = self._owned_todo(request, sender_key)
            stored.exists = False

        elif op == Operation.LIKE_TODO:
            stored = self._existing_todo(request)
            if sender_key in stored.liked_by:
                stored.liked_by.discard(sender_key)
            else:
                stored.liked_by.add(sender_key)
            stored.todo.likes = len(stored.liked_by)

    def _existing_todo(self, request: TransactionRequest) -> _StoredTodo:
        todo_id = int(request.args[0])
        self._require(0 <= todo_id < len(self._todos), "Todo does not exist")
        stored = self._todos[todo_id]
        self._require(stored.exists, "Todo does not exist")
        return stored

    def _owned_todo(self, request: TransactionRequest, sender_key: str) -> _StoredTodo:
        stored = self._existing_todo(request)
        self._require(stored.todo.creator.lower() == sender_key, "Not the todo creator")
        return stored

    @staticmethod
    def _require(condition: bool, reason: str) -> None:
        if not condition:
            raise ContractRevert(reason)

    def _record_read(self, name: str) -> None:
        if self.fail_reads:
            raise ConnectionError("RPC node unavailable")
        self.read_calls[name] = self.read_calls.get(name, 0) + 1
