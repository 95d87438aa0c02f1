"""
App package - Application configuration and core utilities.
Contains settings, exceptions, and foundational application code.
"""

from app.config import settings
from app.exceptions import (
    LifeTrackError,
    ServiceValidationError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    RateLimitedError,
    UpstreamServiceError,
    ServiceUnavailableError,
    UpstreamTimeoutError,
)

__all__ = [
    "settings",
    "LifeTrackError",
    "ServiceValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "RateLimitedError",
    "UpstreamServiceError",
    "ServiceUnavailableError",
    "UpstreamTimeoutError",
]
