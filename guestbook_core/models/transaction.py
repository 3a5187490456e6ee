"""Transaction requests and their lifecycle."""

from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict


class Operation(str, Enum):
    MINT = "mint"
    POST_MESSAGE = "postMessage"
    CREATE_TODO = "createTodo"
    TOGGLE_TODO = "toggleTodoComplete"
    DELETE_TODO = "deleteTodo"
    LIKE_TODO = "likeTodo"


class LifecycleState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    CONFIRMING = "confirming"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATES = frozenset({LifecycleState.SUCCEEDED, LifecycleState.FAILED})


class TransactionRequest(BaseModel):
    """A state-changing contract call. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    operation: Operation
    args: Tuple[Union[str, int], ...] = ()
    value: int = 0                          # Attached value, wei


class TransactionOutcome(BaseModel):
    """What happened to one submitted request."""

    request: TransactionRequest
    state: LifecycleState
    tx_hash: Optional[str] = None
    error_kind: Optional[str] = None        # e.g., "SubmissionError"
    error_detail: Optional[str] = None
    account: Optional[str] = None
    submitted_at: datetime
    finished_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.state == LifecycleState.SUCCEEDED
