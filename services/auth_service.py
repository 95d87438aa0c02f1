from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Tuple
import logging

import bcrypt
import jwt
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from app.config import settings
from app.exceptions import ServiceValidationError, UnauthorizedError
from domain.mappers import DocumentMapper
from domain.schemas.user_schemas import SignupRequest, UserPreferences
from repositories import UserRepository

logger = logging.getLogger("lifetrack.services.auth")

DEFAULT_CALORIE_GOAL = 2000


class AuthService:
    @staticmethod
    def hash_password(password: str) -> str:
        salt = bcrypt.gensalt(rounds=settings.password_hash_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # malformed stored hash
            return False

    @staticmethod
    def create_access_token(user: Dict[str, Any], is_admin: bool = False) -> str:
        """Return a signed JWT for the given user document."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user["_id"]),
            "email": user["email"],
            "first_name": user.get("first_name"),
            "last_name": user.get("last_name"),
            "is_admin": is_admin,
            "iat": now,
            "exp": now + timedelta(days=settings.jwt_expire_days),
        }
        return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """
        Decode and verify a JWT.

        Raises:
            UnauthorizedError: if the token is expired, tampered or malformed
        """
        try:
            return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Token has expired")
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Invalid authentication token")

    @staticmethod
    def signup(db: Database, data: SignupRequest) -> Dict[str, Any]:
        """
        Register a new account.

        Emails are stored lowercase. New accounts start with a 2000 kcal daily
        goal and every feature preference switched off.

        Raises:
            ServiceValidationError: if the email is already registered
        """
        user_repo = UserRepository(db)
        email = data.email.lower().strip()
        if user_repo.email_exists(email):
            raise ServiceValidationError("User already exists")

        document = DocumentMapper.to_storage(
            data.model_dump(exclude={"password", "email"}, exclude_none=True)
        )
        document.update(
            {
                "email": email,
                "password_hash": AuthService.hash_password(data.password),
                "preferences": UserPreferences().model_dump(),
                "onboarding_answers": [],
                "daily_calorie_goal": DEFAULT_CALORIE_GOAL,
                "is_admin": False,
            }
        )
        try:
            user = user_repo.create(document)
        except DuplicateKeyError:
            raise ServiceValidationError("User already exists")
        logger.info("Registered user %s", user["_id"])
        return user

    @staticmethod
    def login(db: Database, email: str, password: str) -> Tuple[Dict[str, Any], str]:
        """
        Authenticate by email and password.

        The configured administrator credentials log in as the admin account.

        Returns:
            (user document, access token)

        Raises:
            UnauthorizedError: on unknown email or wrong password
        """
        email = email.lower().strip()
        if (
            settings.has_admin_credentials()
            and email == settings.admin_email.lower()
            and password == settings.admin_password
        ):
            admin = AuthService.get_or_create_admin_user(db)
            logger.info("Administrator logged in")
            return admin, AuthService.create_access_token(admin, is_admin=True)

        user = UserRepository(db).get_by_email(email)
        if not user or not AuthService.verify_password(password, user.get("password_hash", "")):
            logger.warning("Failed login attempt for %s", email)
            raise UnauthorizedError("Invalid email or password")
        return user, AuthService.create_access_token(user, is_admin=bool(user.get("is_admin")))

    @staticmethod
    def get_or_create_admin_user(db: Database) -> Dict[str, Any]:
        """Return the admin account, creating it on first use. It is the sender of admin messages."""
        if not settings.has_admin_credentials():
            raise UnauthorizedError("Administrator account is not configured")
        user_repo = UserRepository(db)
        admin_email = settings.admin_email.lower()
        admin = user_repo.get_by_email(admin_email)
        if admin:
            if not admin.get("is_admin"):
                admin = user_repo.update_by_id(admin["_id"], {"is_admin": True})
            return admin
        logger.info("Creating administrator account")
        return user_repo.create(
            {
                "email": admin_email,
                "password_hash": AuthService.hash_password(settings.admin_password),
                "first_name": "Admin",
                "last_name": "User",
                "country": "N/A",
                "language": "en",
                "preferences": UserPreferences().model_dump(),
                "onboarding_answers": [],
                "daily_calorie_goal": DEFAULT_CALORIE_GOAL,
                "is_admin": True,
            }
        )
