"""Share-to-feed helpers for messages and todos."""

from typing import Optional
from urllib.parse import urlencode

from guestbook_core.frame.views import truncate
from guestbook_core.models.contract import Message, Todo

COMPOSE_URL = "https://warpcast.com/~/compose"
SHARE_QUOTE_LIMIT = 200


def message_share_text(message: Message, app_url: str) -> str:
    quote = truncate(message.message, SHARE_QUOTE_LIMIT)
    return f'"{quote}" - {message.name}\n\nSigned the on-chain Guest Book: {app_url}'


def todo_share_text(todo: Todo, app_url: str) -> str:
    status = "done" if todo.completed else "open"
    return (
        f"Todo ({status}, {todo.likes} likes): {todo.title}\n\n"
        f"Track it on the on-chain Guest Book: {app_url}"
    )


def compose_share_url(text: str, embed_url: Optional[str] = None) -> str:
    """Compose-cast intent URL with the text (and an optional embed) prefilled."""
    params = [("text", text)]
    if embed_url:
        params.append(("embeds[]", embed_url))
    return f"{COMPOSE_URL}?{urlencode(params)}"
