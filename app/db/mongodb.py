"""
MongoDB Connection Utility

MongoDB stores every entity of the platform:
- users (engineers and students, credentials hashed)
- projects (with their applications embedded)
- features / testimonials (homepage content)
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo.collection import Collection

from app.core.config import get_settings
from app.core.errors import NotFound

settings = get_settings()
logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: Optional[MongoClient] = None
_db: Optional[Database] = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, tz_aware=True)
    return _client


def get_mongo_db() -> Database:
    """Get the application database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def set_mongo_db(db: Optional[Database]) -> None:
    """Swap the database handle (tests plug an in-memory database in here)."""
    global _db
    _db = db


def utcnow() -> datetime:
    """Current UTC time at the millisecond precision BSON stores."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def get_collection(name: str) -> Collection:
    """Get a specific collection. Use the COLLECTIONS constants for names."""
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


def to_object_id(value: str, label: str = "Resource") -> ObjectId:
    """
    Parse a path id into an ObjectId.

    A malformed id cannot name a stored document, so it is reported as
    NotFound rather than a validation problem.
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFound(f"{label} not found")


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "projects": "projects",
    "features": "features",
    "testimonials": "testimonials"
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # Email is the login identity
    db[COLLECTIONS["users"]].create_index("email", unique=True)
    db[COLLECTIONS["users"]].create_index("role")

    projects = db[COLLECTIONS["projects"]]
    projects.create_index([
        ("skills", ASCENDING),
        ("difficulty", ASCENDING),
        ("status", ASCENDING)
    ])
    projects.create_index("owner")
    projects.create_index("student")
    projects.create_index("applications.student")

    db[COLLECTIONS["features"]].create_index([("is_active", ASCENDING), ("order", ASCENDING)])
    db[COLLECTIONS["testimonials"]].create_index([("is_featured", ASCENDING), ("created_at", DESCENDING)])

    logger.info("MongoDB indexes created successfully")
