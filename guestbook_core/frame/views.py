"""
Frame View Server: button-driven views over live contract data.

Stateless per request: every call fetches a fresh snapshot, derives the
view from the last button value alone, and shares nothing with other
requests. A failed contract read degrades to an empty snapshot.
"""

import logging
from typing import List, Optional, Sequence, TypeVar

from guestbook_core.contract.gateway import ContractGateway
from guestbook_core.contract.read_model import fetch_snapshot
from guestbook_core.errors import ReadError
from guestbook_core.models.config import GuestbookConfig
from guestbook_core.models.contract import ContractSnapshot
from guestbook_core.models.frame import FrameAction, FrameView, ViewSelection

logger = logging.getLogger(__name__)

T = TypeVar("T")

VIEW_MESSAGES = "view_messages"
VIEW_TODOS = "view_todos"
HOME = "home"

THEME_PURPLE = "purple"
THEME_PINK = "pink"


def latest(items: Sequence[T], count: int) -> List[T]:
    """The last `count` items in arrival order, newest first."""
    if count <= 0:
        return []
    return list(reversed(items[-count:]))


def truncate(text: str, limit: int, marker: str = "...") -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + marker


def select_view(button_value: Optional[str]) -> ViewSelection:
    if button_value == VIEW_MESSAGES:
        return ViewSelection.MESSAGES
    if button_value == VIEW_TODOS:
        return ViewSelection.TODOS
    return ViewSelection.HOME


def _open_app(config: GuestbookConfig) -> FrameAction:
    return FrameAction(label="Open App", url=config.app_url)


def build_view(
    button_value: Optional[str],
    snapshot: ContractSnapshot,
    config: Optional[GuestbookConfig] = None,
    degraded: bool = False,
) -> FrameView:
    """Compute the view, its body and next actions. Pure."""
    config = config or GuestbookConfig()
    selection = select_view(button_value)
    counts = {
        "messages": len(snapshot.messages),
        "todos": len(snapshot.todos),
        "completed": snapshot.completed_todo_count,
    }
    back_actions = [FrameAction(label="Home", value=HOME), _open_app(config)]

    if selection == ViewSelection.MESSAGES:
        body = [
            {
                "name": m.name,
                "sender": m.sender,
                "message": truncate(
                    m.message, config.frame_truncate_length, config.truncation_marker
                ),
                "timestamp": m.timestamp,
            }
            for m in latest(snapshot.messages, config.frame_latest_count)
        ]
        return FrameView(
            view=selection,
            theme=THEME_PURPLE,
            title="Latest Messages",
            body=body,
            counts=counts,
            actions=back_actions,
            degraded=degraded,
        )

    if selection == ViewSelection.TODOS:
        body = [
            {
                "id": t.id,
                "title": t.title,
                "completed": t.completed,
                "likes": t.likes,
                "timestamp": t.timestamp,
            }
            for t in latest(snapshot.todos, config.frame_latest_count)
        ]
        return FrameView(
            view=selection,
            theme=THEME_PINK,
            title="Latest Todos",
            body=body,
            counts=counts,
            actions=back_actions,
            degraded=degraded,
        )

    return FrameView(
        view=ViewSelection.HOME,
        theme=THEME_PURPLE,
        title="Guest Book",
        body=[{"label": "Messages", "value": counts["messages"]},
              {"label": "Todos", "value": counts["todos"]},
              {"label": "Completed", "value": counts["completed"]}],
        counts=counts,
        actions=[
            FrameAction(label="Messages", value=VIEW_MESSAGES),
            FrameAction(label="Todos", value=VIEW_TODOS),
            _open_app(config),
        ],
        degraded=degraded,
    )


async def render_frame(
    button_value: Optional[str],
    gateway: ContractGateway,
    config: Optional[GuestbookConfig] = None,
) -> FrameView:
    """Handle one frame request. Never raises on read failure."""
    try:
        snapshot = await fetch_snapshot(gateway)
        degraded = False
    except ReadError as e:
        logger.warning("Frame falling back to empty data: %s", e)
        snapshot = ContractSnapshot()
        degraded = True
    return build_view(button_value, snapshot, config, degraded=degraded)
