"""
Error taxonomy.

Propagation:
- ValidationError / BusyError: raised synchronously, lifecycle never advances
- SubmissionError / ConfirmationError: move a transaction to FAILED
- ReadError / HandshakeError: absorbed where they occur, degrade to defaults
- PersistenceError: on load treated as absence, on save the old value stays
"""


class GuestbookError(Exception):
    """Base class for all guestbook core errors."""
    pass


class ValidationError(GuestbookError):
    """Required input missing or malformed. Never reaches the network."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class BusyError(GuestbookError):
    """A transaction is already in flight for this actor."""
    pass


class SubmissionError(GuestbookError):
    """Signature rejected or broadcast failed."""
    pass


class ConfirmationError(GuestbookError):
    """The chain rejected or failed a broadcast transaction."""
    pass


class ReadError(GuestbookError):
    """A read-side fetch failed."""
    pass


class PersistenceError(GuestbookError):
    """Stored identity is corrupt or could not be written."""
    pass


class HandshakeError(GuestbookError):
    """Embedded-context detection failed."""
    pass
