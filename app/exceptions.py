from typing import Any, Mapping, Optional


class LifeTrackError(Exception):
    """Base class for errors raised by services and adapters.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
        error_code: code used in the API error envelope
    """

    http_status = 500
    error_code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(LifeTrackError):
    """Raised when input data is invalid or a precondition for a service call is not met."""

    http_status = 400
    error_code = "SERVICE_VALIDATION_ERROR"
    default_message = "Invalid input"


class UnauthorizedError(LifeTrackError):
    """Raised when the caller is not authenticated."""

    http_status = 401
    error_code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class ForbiddenError(LifeTrackError):
    """Raised when the caller is authenticated but not allowed to act."""

    http_status = 403
    error_code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFoundError(LifeTrackError):
    """Raised when a requested resource was not found (or is not owned by the caller)."""

    http_status = 404
    error_code = "NOT_FOUND"
    default_message = "Not found"


class ConflictError(LifeTrackError):
    """Raised when a resource conflict occurs (e.g., duplicate entry)."""

    http_status = 409
    error_code = "CONFLICT"
    default_message = "Conflict"


class RateLimitedError(LifeTrackError):
    """Raised when a third-party API reports rate limiting or an exhausted quota."""

    http_status = 429
    error_code = "RATE_LIMITED"
    default_message = "Rate limit exceeded, please try again later"


class UpstreamServiceError(LifeTrackError):
    """Raised when a third-party API call fails."""

    http_status = 502
    error_code = "UPSTREAM_ERROR"
    default_message = "Upstream service error"


class ServiceUnavailableError(LifeTrackError):
    """Raised when a required backend (database, AI provider) is not configured or reachable."""

    http_status = 503
    error_code = "SERVICE_UNAVAILABLE"
    default_message = "Service unavailable"


class UpstreamTimeoutError(LifeTrackError):
    """Raised when a third-party API call times out."""

    http_status = 504
    error_code = "UPSTREAM_TIMEOUT"
    default_message = "Upstream service timed out"
