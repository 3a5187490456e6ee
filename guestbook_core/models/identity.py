"""Social Identity: who the current session belongs to."""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict


class IdentitySource(str, Enum):
    EMBEDDED = "embedded"     # Supplied by the hosting feed surface
    PERSISTED = "persisted"   # Loaded from a prior session
    NONE = "none"


class SocialIdentity(BaseModel):
    """
    A social account as seen by the app.

    Consumers receive snapshots; the model is frozen so a snapshot can
    never be mutated behind the reconciler's back.
    """

    model_config = ConfigDict(frozen=True)

    id: str                                     # Stable numeric handle (fid)
    handle: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    custody_address: Optional[str] = None
    verified_addresses: Tuple[str, ...] = ()


class IdentityState(BaseModel):
    """The reconciler's authoritative view at one point in time."""

    identity: Optional[SocialIdentity] = None
    source: IdentitySource = IdentitySource.NONE
    ready: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def is_embedded(self) -> bool:
        return self.source == IdentitySource.EMBEDDED
