"""
Leave Portal exceptions.

Every outcome that short-circuits a request is a ``LeaveError`` subclass.
The HTTP layer maps each class to a status code and a generic message so
that callers cannot tell which sub-check rejected them.
"""


class LeaveError(Exception):
    """Base exception for request outcomes rendered as structured errors."""

    status_code: int = 500
    code: str = "internal_error"
    public_message: str = "Internal server error."

    def __init__(self, message: str | None = None) -> None:
        # ``message`` is for logs only; callers always see public_message.
        super().__init__(message or self.public_message)


class ConfigurationError(Exception):
    """Raised at startup when required configuration is missing or invalid."""
    pass


class ValidationError(LeaveError):
    """Raised when a payload field is missing or malformed."""

    status_code = 400
    code = "invalid_input"
    public_message = "Invalid input."

    def __init__(self, message: str | None = None, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class PayloadTooLargeError(ValidationError):
    """Raised when the request body exceeds the accepted size."""

    status_code = 413
    code = "payload_too_large"
    public_message = "Request body too large."


class AccessDeniedError(LeaveError):
    """
    Raised when an origin, region, bot-verification or auth check fails.

    Rendered identically regardless of which check failed.
    """

    status_code = 403
    code = "access_denied"
    public_message = "Access denied."


class AuthenticationError(AccessDeniedError):
    """Raised when the bearer token is missing, malformed, forged or expired."""

    status_code = 401


class RateLimitedError(LeaveError):
    """Raised when a caller exceeds the request quota for a route."""

    status_code = 429
    code = "rate_limited"
    public_message = "Too many requests. Please try again later."

    def __init__(self, message: str | None = None, retry_after: int = 60) -> None:
        self.retry_after = retry_after
        super().__init__(message)


class NotFoundError(LeaveError):
    """Raised when no record matches the requested key."""

    status_code = 404
    code = "not_found"
    public_message = "No matching record."


class UpstreamError(LeaveError):
    """
    Raised when the bot-verification service cannot give an answer.

    The request is denied (fail-closed) but with a distinct code so that
    clients know a retry may succeed.
    """

    status_code = 500
    code = "verification_unavailable"
    public_message = "Verification service unavailable. Please retry."
