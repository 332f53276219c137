"""
Domain-specific exception hierarchy for the availability engine.
"""


class BookingSlotsError(Exception):
    """Base class for all application-level errors."""


class RecordNotFoundError(BookingSlotsError):
    """Raised when a provider or service id cannot be resolved to a record."""


class RecordValidationError(BookingSlotsError):
    """Raised when stored records cannot be loaded or parsed."""


class SlotUnavailableError(BookingSlotsError):
    """Raised when a requested start time is no longer bookable."""

    def __init__(self, message: str, *, start_at=None) -> None:
        super().__init__(message)
        self.start_at = start_at
