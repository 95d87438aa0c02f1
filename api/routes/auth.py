"""Authentication routes: signup, login and logout"""

from fastapi import APIRouter, Depends, Response, status
from pymongo.database import Database
import logging

from api.dependencies import get_db
from app.config import settings
from domain.mappers import UserMapper
from domain.schemas.user_schemas import LoginRequest, SignupRequest
from services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger("lifetrack.api.auth")


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Database = Depends(get_db)):
    """Register a new account"""
    user = AuthService.signup(db, payload)
    return {"message": "User created successfully", "user": UserMapper.to_response(user)}


@router.post("/login")
def login(payload: LoginRequest, response: Response, db: Database = Depends(get_db)):
    """Log in with email and password; the token is returned and set as session cookie."""
    user, token = AuthService.login(db, payload.email, payload.password)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.jwt_expire_days * 24 * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.is_production(),
    )
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": UserMapper.to_response(user),
    }


@router.post("/logout")
def logout(response: Response):
    """Clear the session cookie"""
    response.delete_cookie(settings.session_cookie_name)
    return {"message": "Logged out successfully"}
