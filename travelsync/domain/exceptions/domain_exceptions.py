"""Domain-specific exceptions.

These exceptions represent rule violations inside the selection core.
They should be caught and handled by the application layer.
"""


class DomainException(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        """Initialize domain exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ClassificationError(DomainException):
    """Raised when a legacy item's classification key cannot be parsed."""

    pass


class InvalidTransitionError(DomainException):
    """Raised when a status transition request is malformed."""

    pass


class ReferenceDataError(DomainException):
    """Raised when the place reference data cannot be loaded or validated."""

    pass
