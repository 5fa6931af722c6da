"""
PURPOSE: Exception taxonomy for the webhook service.

    - EventValidationError: client-caused, surfaced as HTTP 400 with its reason.
    - StorageError:         I/O or query failure, surfaced as an opaque HTTP 500.
    - InitializationError:  the store could not be prepared at startup; fatal.

CALLED BY: validator, storage backends, EventService, main.create_app handlers
"""


class SignalLedgerError(Exception):
    """Base class for all service errors."""


class EventValidationError(SignalLedgerError):
    """
    PURPOSE: A webhook payload was rejected before reaching storage.

    Attributes:
        reason: Client-facing rejection message (e.g. "Invalid interval value").
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class StorageError(SignalLedgerError):
    """A storage backend failed to read or write events."""


class InitializationError(SignalLedgerError):
    """A storage backend could not be prepared before serving traffic."""
