"""MongoDB adapter: connection lifecycle and index setup for LifeTrack collections.
"""

from typing import Optional
import logging
from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.database import Database

from app.config import settings

logger = logging.getLogger("lifetrack.mongo")

_client: Optional[MongoClient] = None
_db: Optional[Database] = None

# Collections owned by a single user; all of them are filtered by user_id.
OWNED_COLLECTIONS = (
    "meals",
    "workouts",
    "recipes",
    "expenses",
    "income",
    "exercises",
    "workout_plans",
    "workout_sessions",
    "shopping_items",
    "meal_plans",
    "notifications",
    "updates",
    "bug_reports",
)


# ------------------ Connection ------------------
def connect(uri: str, db_name: str = "lifetrack") -> Database:
    """Open the client, verify it with a ping and prepare indexes.

    Raises the underlying pymongo error when the server is unreachable so the
    application lifespan can retry.
    """
    global _client, _db
    client = MongoClient(uri, serverSelectionTimeoutMS=5000, tz_aware=False)
    try:
        client.admin.command("ping")
    except Exception:
        client.close()
        raise
    _client = client
    _db = client[db_name]
    ensure_indexes(_db)
    logger.info("Connected to MongoDB %s (database: %s)", uri, db_name)
    return _db


def close():
    """Close MongoDB connection."""
    global _client, _db
    try:
        if _client is not None:
            _client.close()
            logger.info("MongoDB client closed")
    except Exception:
        logger.exception("Error closing MongoDB client")
    finally:
        _client = None
        _db = None


def is_connected() -> bool:
    return _db is not None


def get_db() -> Optional[Database]:
    """Return the active database, lazily connecting with configured settings."""
    global _db
    if _db is not None:
        return _db
    try:
        return connect(settings.mongo_uri, settings.mongo_db_name)
    except Exception as exc:
        logger.warning("MongoDB not available: %s", exc)
        return None


def ensure_indexes(db: Database) -> None:
    """Create the indexes the repositories rely on. Safe to call repeatedly."""
    db["users"].create_index([("email", ASCENDING)], unique=True)
    for name in OWNED_COLLECTIONS:
        db[name].create_index([("user_id", ASCENDING)])
    db["meals"].create_index([("user_id", ASCENDING), ("date", ASCENDING)])
    db["workouts"].create_index([("user_id", ASCENDING), ("date", ASCENDING)])
    db["expenses"].create_index([("user_id", ASCENDING), ("date", DESCENDING)])
    db["income"].create_index([("user_id", ASCENDING), ("date", DESCENDING)])
    db["chats"].create_index([("participants", ASCENDING)])
    logger.debug("MongoDB indexes ensured")
