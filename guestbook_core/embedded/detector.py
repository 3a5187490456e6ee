"""
Embedded-Context Detector.

Detects whether the app runs inside a host feed surface that has already
authenticated the user, and exposes that account.

Behavioral Contract:
- Exactly one handshake per detector instance; no retries
- A failed handshake resolves to ready=True, account=None and is logged
- The splash-dismiss signal reaches the host at most once
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

from guestbook_core.errors import HandshakeError
from guestbook_core.models.identity import SocialIdentity

logger = logging.getLogger(__name__)


class HostBridge(Protocol):
    """Protocol for the hosting surface's SDK: pluggable backend."""

    async def context(self) -> Optional[Dict[str, Any]]: ...

    async def ready(self) -> None: ...


class StaticHostBridge:
    """
    In-process host used when running standalone and in tests.
    Returns a fixed context (or raises a fixed error) and counts
    ready() signals.
    """

    def __init__(
        self,
        context: Optional[Dict[str, Any]] = None,
        error: Optional[Exception] = None,
    ):
        self._context = context
        self._error = error
        self.context_calls = 0
        self.ready_calls = 0

    async def context(self) -> Optional[Dict[str, Any]]:
        self.context_calls += 1
        if self._error is not None:
            raise self._error
        return self._context

    async def ready(self) -> None:
        self.ready_calls += 1


def identity_from_host_user(user: Dict[str, Any]) -> SocialIdentity:
    """Map a host context user onto a SocialIdentity."""
    if not isinstance(user, dict):
        raise TypeError(f"host user must be an object, got {type(user).__name__}")
    return SocialIdentity(
        id=str(user["fid"]),
        handle=user.get("username") or "",
        display_name=user.get("displayName"),
        avatar_url=user.get("pfpUrl"),
    )


class EmbeddedContextDetector:
    """Runs the host handshake and publishes the embedded account."""

    def __init__(self, bridge: HostBridge):
        self.bridge = bridge
        self.ready = False
        self.account: Optional[SocialIdentity] = None
        self.context: Optional[Dict[str, Any]] = None
        self._started = False
        self._splash_dismissed = False
        self._listeners: List[Callable[[Optional[SocialIdentity]], None]] = []

    @property
    def splash_dismissed(self) -> bool:
        return self._splash_dismissed

    def subscribe(self, listener: Callable[[Optional[SocialIdentity]], None]) -> None:
        """Be told the account once the handshake resolves."""
        self._listeners.append(listener)
        if self.ready:
            listener(self.account)

    async def initialize(self) -> Optional[SocialIdentity]:
        """
        Run the handshake. A second call returns the first result
        without contacting the host again.
        """
        if self._started:
            return self.account
        self._started = True

        try:
            self.context = await self._handshake()
        except HandshakeError as e:
            logger.warning("Embedded context handshake failed: %s", e)
            self.context = None

        user = (self.context or {}).get("user")
        if user:
            try:
                self.account = identity_from_host_user(user)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Embedded context user is malformed: %s", e)
                self.account = None

        self.ready = True
        if self.account is not None:
            await self.dismiss_splash()

        for listener in self._listeners:
            listener(self.account)
        return self.account

    async def dismiss_splash(self) -> None:
        """Ask the host to hide its loading splash. Later calls are no-ops."""
        if self._splash_dismissed:
            return
        self._splash_dismissed = True
        try:
            await self.bridge.ready()
        except Exception as e:
            logger.warning("Host rejected splash dismissal: %s", e)

    async def _handshake(self) -> Optional[Dict[str, Any]]:
        try:
            context = await self.bridge.context()
        except Exception as e:
            raise HandshakeError(str(e)) from e
        if context is not None and not isinstance(context, dict):
            raise HandshakeError(
                f"host context must be an object, got {type(context).__name__}"
            )
        return context
