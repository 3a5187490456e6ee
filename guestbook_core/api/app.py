"""
Guestbook API: FastAPI endpoints.

Exposes:
- The frame view server (GET and POST, same response shape)
- Share links for messages and todos
- Health
"""

from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from guestbook_core.config import configure_logging, load_config
from guestbook_core.contract.gateway import ContractGateway, InMemoryGuestBook
from guestbook_core.contract.read_model import fetch_snapshot
from guestbook_core.errors import ReadError
from guestbook_core.frame.share import (
    compose_share_url,
    message_share_text,
    todo_share_text,
)
from guestbook_core.frame.views import render_frame
from guestbook_core.models.config import GuestbookConfig
from guestbook_core.models.frame import FrameView


# --- Request/Response Models ---

class UntrustedData(BaseModel):
    buttonIndex: Optional[int] = None
    buttonValue: Optional[str] = None
    inputText: Optional[str] = None


class FrameActionRequest(BaseModel):
    untrustedData: Optional[UntrustedData] = None
    buttonValue: Optional[str] = None

    def resolved_button_value(self) -> Optional[str]:
        if self.buttonValue is not None:
            return self.buttonValue
        if self.untrustedData is not None:
            return self.untrustedData.buttonValue
        return None


class ShareResponse(BaseModel):
    text: str
    url: str


# --- Application Factory ---

def create_app(
    config: Optional[GuestbookConfig] = None,
    gateway: Optional[ContractGateway] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    config = config or GuestbookConfig()
    gw = gateway or InMemoryGuestBook(
        mint_fee=config.mint_fee_wei, message_fee=config.message_fee_wei
    )
    configure_logging(config.log_level)

    app = FastAPI(
        title="Guest Book API",
        description="On-chain guestbook and community todos: frame server",
        version="0.1.0",
    )
    app.state.config = config
    app.state.gateway = gw

    # === FRAME ===

    @app.get("/frame", response_model=FrameView)
    async def frame_get(buttonValue: Optional[str] = None):
        """Render the frame for an optional prior button value."""
        return await render_frame(buttonValue, gw, config)

    @app.post("/frame", response_model=FrameView)
    async def frame_post(req: FrameActionRequest):
        """Handle a button press."""
        return await render_frame(req.resolved_button_value(), gw, config)

    # === SHARING ===

    @app.get("/share/message/{index}", response_model=ShareResponse)
    async def share_message(index: int):
        """Share link for the message at `index` (arrival order)."""
        snapshot = await _snapshot_or_503(gw)
        if index < 0 or index >= len(snapshot.messages):
            raise HTTPException(404, "Message not found")
        text = message_share_text(snapshot.messages[index], config.app_url)
        return ShareResponse(text=text, url=compose_share_url(text, config.app_url))

    @app.get("/share/todo/{todo_id}", response_model=ShareResponse)
    async def share_todo(todo_id: int):
        """Share link for a todo by id."""
        snapshot = await _snapshot_or_503(gw)
        todo = next((t for t in snapshot.todos if t.id == todo_id), None)
        if todo is None:
            raise HTTPException(404, "Todo not found")
        text = todo_share_text(todo, config.app_url)
        return ShareResponse(text=text, url=compose_share_url(text, config.app_url))

    # === HEALTH ===

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "chain_id": config.chain_id,
            "contract_address": config.contract_address,
        }

    return app


async def _snapshot_or_503(gateway: ContractGateway):
    try:
        return await fetch_snapshot(gateway)
    except ReadError as e:
        raise HTTPException(503, f"Contract unavailable: {e}") from e


# Default application instance
app = create_app(load_config())
