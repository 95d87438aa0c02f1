"""
API dependencies for dependency injection
"""

from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pymongo.database import Database

from adapters import mongo_adapter
from app.config import settings
from app.exceptions import ForbiddenError, ServiceUnavailableError, UnauthorizedError
from repositories import UserRepository
from services.auth_service import AuthService

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Database:
    """
    Database dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db: Database = Depends(get_db)):
            # Use db here
            pass
    """
    db = mongo_adapter.get_db()
    if db is None:
        raise ServiceUnavailableError("Database is not available")
    return db


def get_token_claims(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Any]:
    """Read the JWT from the Authorization header or the session cookie and verify it."""
    token = credentials.credentials if credentials else request.cookies.get(settings.session_cookie_name)
    if not token:
        raise UnauthorizedError("Not authenticated")
    return AuthService.decode_token(token)


def get_current_user(
    claims: Dict[str, Any] = Depends(get_token_claims),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    """Resolve the authenticated user document; 401 when the account no longer exists."""
    user = UserRepository(db).get_by_id(claims.get("sub"))
    if not user:
        raise UnauthorizedError("User not found")
    return user


def require_admin(
    claims: Dict[str, Any] = Depends(get_token_claims),
    user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    if not claims.get("is_admin"):
        raise ForbiddenError("Admin access required")
    return user
