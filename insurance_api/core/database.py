"""MongoDB client and collection access."""

from functools import lru_cache

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from insurance_api.core.config import get_settings

USERS_COLLECTION = "users"


@lru_cache
def get_client() -> MongoClient:
    """Process-wide client; pymongo pools connections and connects lazily."""
    settings = get_settings()
    return MongoClient(
        settings.MONGO_URI,
        serverSelectionTimeoutMS=settings.MONGO_TIMEOUT_MS,
        tz_aware=True,
    )


def get_db() -> Database:
    """Dependency that returns the application database."""
    return get_client()[get_settings().MONGO_DB_NAME]


def get_users_collection() -> Collection:
    return get_db()[USERS_COLLECTION]


def check_db_connected(db: Database) -> bool:
    """Run a ping to verify the database is reachable."""
    try:
        db.command("ping")
        return True
    except PyMongoError:
        return False
