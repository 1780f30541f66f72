"""
Domain exceptions for QuizHub.

Every error the services raise carries a machine-readable ``kind`` and the
HTTP status it maps to. ``quizhub.main`` renders them as
``{"error": kind, "detail": message}``.
"""


class QuizHubError(Exception):
    """Base exception for all QuizHub errors."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.message}


class NotFoundError(QuizHubError):
    """Raised when a quiz, question or result does not exist."""

    kind = "not_found"
    status_code = 404


class ValidationError(QuizHubError):
    """Raised for missing required fields or a malformed payload."""

    kind = "validation_error"
    status_code = 400

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)


class AuthorizationError(QuizHubError):
    """Raised when the caller may not perform a mutation."""

    kind = "authorization_error"
    status_code = 403


class ConflictError(QuizHubError):
    """Raised on duplicate registrations or disallowed resubmissions."""

    kind = "conflict"
    status_code = 409


class UnavailableError(QuizHubError):
    """Raised when the store or Redis times out or cannot be reached.

    Callers may retry; the core never does.
    """

    kind = "unavailable"
    status_code = 503

    def to_dict(self) -> dict:
        return {**super().to_dict(), "retryable": True}
