"""Guestbook core data models."""

from guestbook_core.models.config import FieldLimits, GuestbookConfig
from guestbook_core.models.contract import ContractSnapshot, Message, Todo
from guestbook_core.models.frame import FrameAction, FrameView, ViewSelection
from guestbook_core.models.identity import (
    IdentitySource,
    IdentityState,
    SocialIdentity,
)
from guestbook_core.models.transaction import (
    LifecycleState,
    Operation,
    TransactionOutcome,
    TransactionRequest,
)

__all__ = [
    "ContractSnapshot",
    "FieldLimits",
    "FrameAction",
    "FrameView",
    "GuestbookConfig",
    "IdentitySource",
    "IdentityState",
    "LifecycleState",
    "Message",
    "Operation",
    "SocialIdentity",
    "Todo",
    "TransactionOutcome",
    "TransactionRequest",
    "ViewSelection",
]
