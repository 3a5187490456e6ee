"""
Transaction Orchestrator: validate → submit → confirm → refresh.

Behavioral Contract:
- Preconditions are checked before any network call; violations raise
  ValidationError and the lifecycle stays IDLE
- One request in flight per actor; a submit while in flight raises BusyError
- Submission/confirmation failures end in FAILED and come back as a
  TransactionOutcome carrying the typed error, never as an uncaught raise
- On SUCCEEDED the operation's form inputs are cleared and exactly one
  refresh of every read-side dataset runs after refresh_delay_seconds
- No user-facing cancel: a request that leaves IDLE always reaches a terminal
  state; if the awaiting task itself is cancelled it ends in FAILED and the
  cancellation propagates
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional, Set, Tuple, Union

from pydantic import BaseModel

from guestbook_core.contract.gateway import ContractGateway
from guestbook_core.contract.read_model import ReadModel
from guestbook_core.errors import (
    BusyError,
    ConfirmationError,
    GuestbookError,
    SubmissionError,
    ValidationError,
)
from guestbook_core.models.config import GuestbookConfig
from guestbook_core.models.transaction import (
    LifecycleState,
    Operation,
    TransactionOutcome,
    TransactionRequest,
)
from guestbook_core.transactions.lifecycle import TransactionLifecycle

logger = logging.getLogger(__name__)


class FormInputs(BaseModel):
    """Transient UI input fields."""

    name: str = ""
    message: str = ""
    todo_title: str = ""
    todo_description: str = ""


# Which input fields belong to which operation
OPERATION_INPUTS: Dict[Operation, Tuple[str, ...]] = {
    Operation.POST_MESSAGE: ("name", "message"),
    Operation.CREATE_TODO: ("todo_title", "todo_description"),
}

TODO_ID_OPERATIONS = (Operation.TOGGLE_TODO, Operation.DELETE_TODO, Operation.LIKE_TODO)


class TransactionOrchestrator:
    """Drives every state-changing contract call for one actor."""

    def __init__(
        self,
        gateway: ContractGateway,
        account_provider: Callable[[], Optional[str]],
        config: Optional[GuestbookConfig] = None,
        read_model: Optional[ReadModel] = None,
        refresh: Optional[Callable[[], Awaitable[object]]] = None,
    ):
        self.gateway = gateway
        self.account_provider = account_provider
        self.config = config or GuestbookConfig()
        self.read_model = read_model
        self._refresh = refresh or (read_model.refresh if read_model else None)

        self.inputs = FormInputs()
        self.lifecycle = TransactionLifecycle()
        self.last_outcome: Optional[TransactionOutcome] = None
        self.last_error: Optional[GuestbookError] = None
        self._refresh_tasks: Set[asyncio.Task] = set()

    @property
    def status(self) -> LifecycleState:
        return self.lifecycle.state

    @property
    def is_busy(self) -> bool:
        return self.lifecycle.in_flight

    # --- Request builders ---

    async def mint(self) -> TransactionOutcome:
        return await self.submit(TransactionRequest(
            operation=Operation.MINT, value=self.config.mint_fee_wei,
        ))

    async def post_message(
        self, name: Optional[str] = None, message: Optional[str] = None
    ) -> TransactionOutcome:
        name = self.inputs.name if name is None else name
        message = self.inputs.message if message is None else message
        return await self.submit(TransactionRequest(
            operation=Operation.POST_MESSAGE,
            args=(name, message),
            value=self.config.message_fee_wei,
        ))

    async def create_todo(
        self, title: Optional[str] = None, description: Optional[str] = None
    ) -> TransactionOutcome:
        title = self.inputs.todo_title if title is None else title
        description = self.inputs.todo_description if description is None else description
        fee = self.read_model.todo_fee if self.read_model else None
        return await self.submit(TransactionRequest(
            operation=Operation.CREATE_TODO,
            args=(title, description),
            value=fee or 0,
        ))

    async def toggle_todo(self, todo_id: int) -> TransactionOutcome:
        return await self.submit(TransactionRequest(
            operation=Operation.TOGGLE_TODO, args=(todo_id,),
        ))

    async def delete_todo(self, todo_id: int) -> TransactionOutcome:
        return await self.submit(TransactionRequest(
            operation=Operation.DELETE_TODO, args=(todo_id,),
        ))

    async def like_todo(self, todo_id: int) -> TransactionOutcome:
        return await self.submit(TransactionRequest(
            operation=Operation.LIKE_TODO, args=(todo_id,),
        ))

    # --- Lifecycle ---

    def validate(self, request: TransactionRequest) -> str:
        """
        Check preconditions. Returns the submitting account.
        Raises ValidationError without touching the network.
        """
        account = self.account_provider()
        if not account:
            raise ValidationError("account", "connect a wallet first")

        op = request.operation
        limits = self.config.limits

        if op == Operation.MINT:
            if request.args:
                raise ValidationError("args", "mint takes no arguments")

        elif op == Operation.POST_MESSAGE:
            name, message = self._text_args(request, 2)
            _require_text("name", name, limits.name)
            _require_text("message", message, limits.message)
            if self.read_model is not None and not self.read_model.has_access_pass:
                raise ValidationError("access_pass", "mint an access pass before posting")

        elif op == Operation.CREATE_TODO:
            title, description = self._text_args(request, 2)
            _require_text("title", title, limits.todo_title)
            if len(description) > limits.todo_description:
                raise ValidationError(
                    "description", f"must be at most {limits.todo_description} characters"
                )

        elif op in TODO_ID_OPERATIONS:
            if len(request.args) != 1:
                raise ValidationError("todo_id", "exactly one todo id is required")
            todo_id = request.args[0]
            if isinstance(todo_id, bool) or not isinstance(todo_id, int) or todo_id < 0:
                raise ValidationError("todo_id", "must be a non-negative integer")

        return account

    async def submit(self, request: TransactionRequest) -> TransactionOutcome:
        """Run one request through the full lifecycle."""
        if self.lifecycle.is_terminal:
            self.lifecycle.reset()
        if self.lifecycle.in_flight:
            raise BusyError(
                f"{request.operation.value} rejected: a transaction is {self.status.value}"
            )

        account = self.validate(request)

        self.lifecycle.transition(LifecycleState.SUBMITTING)
        self.last_error = None
        outcome = TransactionOutcome(
            request=request,
            state=LifecycleState.SUBMITTING,
            account=account,
            submitted_at=datetime.utcnow(),
        )
        self.last_outcome = outcome

        try:
            tx_hash = await self._broadcast(request, account)
            outcome.tx_hash = tx_hash
            self._advance(outcome, LifecycleState.CONFIRMING)
            await self._confirm(tx_hash)
        except (SubmissionError, ConfirmationError) as e:
            logger.error("%s failed: %s", request.operation.value, e)
            self.last_error = e
            outcome.error_kind = type(e).__name__
            outcome.error_detail = str(e)
            self._advance(outcome, LifecycleState.FAILED)
            return outcome
        except asyncio.CancelledError:
            logger.warning(
                "%s cancelled while %s", request.operation.value, self.status.value
            )
            outcome.error_kind = "CancelledError"
            outcome.error_detail = f"cancelled while {self.status.value}"
            self._advance(outcome, LifecycleState.FAILED)
            raise

        self._advance(outcome, LifecycleState.SUCCEEDED)
        logger.info("%s confirmed in %s", request.operation.value, outcome.tx_hash)
        self._clear_inputs(request.operation)
        self._schedule_refresh()
        return outcome

    async def wait_for_refresh(self) -> None:
        """Await every pending post-confirmation refresh."""
        if self._refresh_tasks:
            await asyncio.gather(*self._refresh_tasks)

    async def _broadcast(self, request: TransactionRequest, account: str) -> str:
        try:
            return await self.gateway.submit(request, account)
        except SubmissionError:
            raise
        except Exception as e:
            raise SubmissionError(str(e)) from e

    async def _confirm(self, tx_hash: str) -> None:
        try:
            confirmed = await self.gateway.await_confirmation(tx_hash)
        except Exception as e:
            raise ConfirmationError(str(e)) from e
        if not confirmed:
            raise ConfirmationError(f"Transaction {tx_hash} reverted")

    def _advance(self, outcome: TransactionOutcome, state: LifecycleState) -> None:
        self.lifecycle.transition(state)
        outcome.state = state
        if state in (LifecycleState.SUCCEEDED, LifecycleState.FAILED):
            outcome.finished_at = datetime.utcnow()

    def _clear_inputs(self, operation: Operation) -> None:
        for field_name in OPERATION_INPUTS.get(operation, ()):
            setattr(self.inputs, field_name, "")

    def _schedule_refresh(self) -> None:
        if self._refresh is None:
            return
        task = asyncio.get_running_loop().create_task(self._delayed_refresh())
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)

    async def _delayed_refresh(self) -> None:
        # Best-effort freshness only: the node may still lag after the delay.
        await asyncio.sleep(self.config.refresh_delay_seconds)
        try:
            await self._refresh()
        except Exception as e:
            logger.warning("Post-confirmation refresh failed: %s", e)

    @staticmethod
    def _text_args(request: TransactionRequest, count: int) -> Tuple[str, ...]:
        if len(request.args) != count:
            raise ValidationError("args", f"expected {count} arguments")
        return tuple(str(a) for a in request.args)


def _require_text(field: str, value: Union[str, int], limit: int) -> None:
    text = str(value)
    if not text.strip():
        raise ValidationError(field, "is required")
    if len(text) > limit:
        raise ValidationError(field, f"must be at most {limit} characters")
