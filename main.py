"""
LifeTrack FastAPI Application
Main entry point: routers, middleware, exception handlers and the MongoDB lifespan
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import uvicorn
from contextlib import asynccontextmanager
import anyio
from typing import Optional

from api.routes import (
    health,
    auth,
    users,
    meals,
    recipes,
    nutrition,
    finance,
    workouts,
    shopping,
    notifications,
    admin,
    meal_plans,
    fitness_chat,
)

from adapters import mongo_adapter

from app.config import settings

from api.middleware import (
    RequestLoggingMiddleware,
    validation_exception_handler,
    http_exception_handler,
    app_exception_handler,
    general_exception_handler,
)
from app.exceptions import LifeTrackError

# Setup logging with configured level and format
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
_logger = logging.getLogger("lifetrack.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup and shutdown.
    Connects to MongoDB with retries; the blocking connect runs in a worker thread.
    """
    last_exc: Optional[Exception] = None

    _logger.info(f"Starting LifeTrack in {settings.environment.value} mode")

    for attempt in range(1, settings.db_init_attempts + 1):
        try:
            await anyio.to_thread.run_sync(
                mongo_adapter.connect, settings.mongo_uri, settings.mongo_db_name
            )
            _logger.info("MongoDB connection established")
            break
        except Exception as exc:
            last_exc = exc
            _logger.warning(
                "MongoDB connect attempt %d/%d failed: %s",
                attempt,
                settings.db_init_attempts,
                exc,
            )
            if attempt < settings.db_init_attempts:
                await anyio.sleep(settings.db_init_delay_sec)
            else:
                _logger.error("MongoDB connection failed after %d attempts", attempt)
                raise

    try:
        yield
    finally:
        _logger.info("Shutting down LifeTrack")
        try:
            mongo_adapter.close()
            _logger.info("MongoDB connection closed")
        except Exception as e:
            _logger.exception("Error closing MongoDB adapter during shutdown: %s", e)


app = FastAPI(
    title=settings.api_title,
    version=settings.app_version,
    description=settings.api_description,
    lifespan=lifespan,
    debug=settings.debug,
    openapi_url=(
        f"{settings.api_prefix}/openapi.json" if not settings.is_production() else None
    ),
    docs_url=f"{settings.api_prefix}/docs" if not settings.is_production() else None,
    redoc_url=f"{settings.api_prefix}/redoc" if not settings.is_production() else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

app.add_middleware(RequestLoggingMiddleware)

# Register exception handlers
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(LifeTrackError, app_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

for module in (
    health,
    auth,
    users,
    meals,
    recipes,
    nutrition,
    finance,
    workouts,
    shopping,
    notifications,
    admin,
    meal_plans,
    fitness_chat,
):
    app.include_router(module.router, prefix=settings.api_prefix)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
