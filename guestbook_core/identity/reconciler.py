"""
Identity Reconciler: one authoritative social identity per session.

Merges three sources with explicit precedence:
  1. Embedded host account  (authoritative, interactive sign-in ignored)
  2. Persisted / interactive sign-in identity
  3. None

Behavioral Contract:
- Reports ready=False until the persisted identity has been loaded
- Interactive sign-in is honored only when not embedded, and is persisted
- A failed persist keeps the new identity in memory for this session only
- sign_out() clears local and persisted state even when embedded; the
  host's own session is out of reach
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from guestbook_core.embedded.detector import EmbeddedContextDetector
from guestbook_core.errors import PersistenceError, ValidationError
from guestbook_core.identity.store import IdentityStore
from guestbook_core.models.identity import IdentitySource, IdentityState, SocialIdentity

logger = logging.getLogger(__name__)


def reconcile(
    embedded: Optional[SocialIdentity],
    persisted: Optional[SocialIdentity],
) -> IdentityState:
    """Pure precedence function over the identity sources."""
    if embedded is not None:
        return IdentityState(identity=embedded, source=IdentitySource.EMBEDDED, ready=True)
    if persisted is not None:
        return IdentityState(identity=persisted, source=IdentitySource.PERSISTED, ready=True)
    return IdentityState(ready=True)


def normalize_profile(profile: Dict[str, Any]) -> SocialIdentity:
    """Map an interactive sign-in profile onto a SocialIdentity."""
    if profile.get("fid") is None:
        raise ValidationError("fid", "sign-in profile has no fid")
    pfp = profile.get("pfp") or {}
    avatar = pfp.get("url") if isinstance(pfp, dict) else None
    return SocialIdentity(
        id=str(profile["fid"]),
        handle=profile.get("username") or "",
        display_name=profile.get("displayName"),
        avatar_url=avatar or profile.get("pfpUrl"),
        bio=profile.get("bio"),
        custody_address=profile.get("custody"),
        verified_addresses=tuple(profile.get("verifications") or ()),
    )


class IdentityReconciler:
    """Holds the current identity and recomputes it on every input change."""

    def __init__(
        self,
        store: IdentityStore,
        detector: Optional[EmbeddedContextDetector] = None,
    ):
        self.store = store
        self.detector = detector
        self._embedded: Optional[SocialIdentity] = None
        self._persisted: Optional[SocialIdentity] = None
        self._state = IdentityState()
        self._started = False
        self._listeners: List[Callable[[IdentityState], None]] = []

    @property
    def state(self) -> IdentityState:
        """Current snapshot. Not ready until start() has run."""
        return self._state

    @property
    def identity(self) -> Optional[SocialIdentity]:
        return self._state.identity

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def is_embedded(self) -> bool:
        return self._state.is_embedded

    def subscribe(self, listener: Callable[[IdentityState], None]) -> None:
        self._listeners.append(listener)

    def start(self) -> IdentityState:
        """Load persisted identity, then begin following the detector."""
        if self._started:
            return self._state
        self._persisted = self.store.load()
        self._started = True
        if self.detector is not None:
            self.detector.subscribe(self.on_embedded_account)
        self._recompute()
        return self._state

    def on_embedded_account(self, account: Optional[SocialIdentity]) -> None:
        self._embedded = account
        self._recompute()

    def on_sign_in(self, profile: Dict[str, Any]) -> IdentityState:
        """Interactive sign-in completed with a profile."""
        if self._embedded is not None:
            logger.debug("Ignoring interactive sign-in while embedded")
            return self._state

        identity = normalize_profile(profile)
        self._persisted = identity
        try:
            self.store.save(identity)
        except PersistenceError as e:
            logger.warning("Identity kept for this session only: %s", e)
        self._recompute()
        return self._state

    def on_sign_in_cleared(self) -> IdentityState:
        """Interactive sign-in reports no authenticated profile."""
        if self._embedded is not None:
            return self._state
        self._persisted = None
        self.store.clear()
        self._recompute()
        return self._state

    def sign_out(self) -> IdentityState:
        """Clear the current identity and anything persisted."""
        if self._embedded is not None:
            logger.info("Signing out locally; host session remains active")
        self._embedded = None
        self._persisted = None
        self.store.clear()
        self._recompute()
        return self._state

    def _recompute(self) -> None:
        if not self._started:
            return
        new_state = reconcile(self._embedded, self._persisted)
        if new_state == self._state:
            return
        self._state = new_state
        logger.debug("Identity source is now %s", new_state.source.value)
        for listener in self._listeners:
            listener(new_state)
