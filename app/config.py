"""
Application configuration with Pydantic Settings for validation and type safety.
Supports environment-specific configurations and .env file loading.
"""

from enum import Enum
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Environment(str, Enum):
    """Application environment types"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Application settings with validation.
    Settings are loaded from environment variables or .env file.
    """

    # Application settings
    app_name: str = Field(default="LifeTrack", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")

    # MongoDB settings
    mongo_uri: str = Field(
        default="mongodb://localhost:27017", description="MongoDB connection URI"
    )
    mongo_db_name: str = Field(default="lifetrack", description="MongoDB database name")
    db_init_attempts: int = Field(
        default=5, ge=1, description="Database connection retry attempts"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Delay between DB connection attempts"
    )

    # Authentication
    jwt_secret: str = Field(
        default="change-me-in-production", description="Secret used to sign JWTs"
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_expire_days: int = Field(default=7, ge=1, description="Token lifetime in days")
    password_hash_rounds: int = Field(
        default=12, ge=4, le=16, description="bcrypt cost factor"
    )
    session_cookie_name: str = Field(
        default="lifetrack_session", description="Cookie carrying the session token"
    )
    admin_email: Optional[str] = Field(
        default=None, description="Email that logs in as administrator"
    )
    admin_password: Optional[str] = Field(
        default=None, description="Password for the administrator login"
    )

    # OpenAI
    openai_api_key: Optional[str] = Field(
        default=None, description="OpenAI API key; AI features fall back when unset"
    )
    openai_model: str = Field(default="gpt-4o-mini", description="Chat model")
    openai_vision_model: str = Field(
        default="gpt-4o-mini", description="Model used for image analysis"
    )
    openai_timeout_sec: float = Field(
        default=60.0, gt=0, description="Timeout for a single LLM call"
    )
    meal_plan_timeout_sec: float = Field(
        default=90.0, gt=0, description="Timeout for one meal plan day generation"
    )

    # External APIs
    edamam_food_app_id: Optional[str] = Field(
        default=None, description="Edamam food database app id"
    )
    edamam_food_app_key: Optional[str] = Field(
        default=None, description="Edamam food database app key"
    )
    edamam_recipe_app_id: Optional[str] = Field(
        default=None, description="Edamam recipe search app id"
    )
    edamam_recipe_app_key: Optional[str] = Field(
        default=None, description="Edamam recipe search app key"
    )
    openfoodfacts_base_url: str = Field(
        default="https://world.openfoodfacts.org",
        description="OpenFoodFacts base URL",
    )
    exercise_api_base_url: str = Field(
        default="https://exercisedb-api.vercel.app/api/v1",
        description="Exercise catalog API base URL",
    )
    http_timeout_sec: float = Field(
        default=10.0, gt=0, description="Timeout for third-party HTTP calls"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format string",
    )

    # CORS settings
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow CORS credentials"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"], description="Allowed HTTP methods"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )

    # API settings
    api_prefix: str = Field(default="/api", description="API route prefix")
    api_title: str = Field(
        default="LifeTrack API", description="API documentation title"
    )
    api_description: str = Field(
        default="Meal, workout, finance and lifestyle tracking with AI assistance",
        description="API documentation description",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment value"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        """Check if running in testing environment"""
        return self.environment == Environment.TESTING

    def has_admin_credentials(self) -> bool:
        """Admin login is only possible when both credentials are configured"""
        return bool(self.admin_email and self.admin_password)


# Global settings instance
settings = Settings()
