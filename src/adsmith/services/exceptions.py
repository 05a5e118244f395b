"""Custom exceptions for adsmith services.

Every failure is scoped to the operation that raised it. The editor facade
turns these into user-visible notices; none of them should end the process.
"""

from typing import Optional


class AdsmithError(Exception):
    """Base class for all adsmith errors."""


class ValidationFailure(AdsmithError):
    """Raised when user input or editor state does not allow the operation.

    Reported inline. No mutation has happened and the user may retry.
    """


class NothingSelected(ValidationFailure):
    """Raised when no target element could be resolved for an annotation."""

    def __init__(self, message: str = "Nothing selected"):
        super().__init__(message)


class StateInconsistency(ValidationFailure):
    """Raised when a remembered selection or target no longer exists.

    Handled exactly like NothingSelected by callers.
    """


class TransportFailure(AdsmithError):
    """Raised when a call to the ads API fails (network, HTTP status, bad body).

    Attributes:
        operation: API operation that failed ("list", "upsert", "delete")
        status_code: HTTP status code, if a response was received
        message: Human-readable error message
    """

    def __init__(self, operation: str, message: str, status_code: Optional[int] = None):
        """Initialize TransportFailure.

        Args:
            operation: API operation that failed
            message: Human-readable error message
            status_code: HTTP status code, if any
        """
        self.operation = operation
        self.status_code = status_code
        self.message = message
        super().__init__(f"{operation} failed: {message}")
