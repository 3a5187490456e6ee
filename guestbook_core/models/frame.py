"""Frame view payloads: structural data only, rendering happens elsewhere."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel


class ViewSelection(str, Enum):
    HOME = "home"
    MESSAGES = "messages"
    TODOS = "todos"


class FrameAction(BaseModel):
    """A next action: either an in-frame button or an external link."""

    label: str
    value: Optional[str] = None             # Button value posted back on click
    url: Optional[str] = None               # Open-app link target

    @property
    def is_link(self) -> bool:
        return self.url is not None


class FrameView(BaseModel):
    """The composed response for one frame request."""

    view: ViewSelection
    theme: str
    title: str
    body: List[dict] = []
    counts: Dict[str, int] = {}
    actions: List[FrameAction]
    degraded: bool = False                  # True when the contract read failed
