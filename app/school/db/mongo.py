import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

logger = logging.getLogger(__name__)

USERS = "users"
CLASSES = "classes"
ATTENDANCES = "attendances"

DEFAULT_DB_NAME = "school"


def create_client(uri: str) -> AsyncIOMotorClient:
    """Creates the process-wide client. Datetimes come back timezone-aware (UTC)."""
    return AsyncIOMotorClient(uri, tz_aware=True, serverSelectionTimeoutMS=5000)


def get_database(client: AsyncIOMotorClient, db_name: Optional[str] = None) -> AsyncIOMotorDatabase:
    """An explicit name wins, then the database named in the URI, then the default."""
    if db_name:
        return client[db_name]
    return client.get_default_database(default=DEFAULT_DB_NAME)


async def connect(uri: str) -> AsyncIOMotorClient:
    """
    Connects and verifies the server is reachable. Any failure propagates so
    that application startup aborts.
    """
    client = create_client(uri)
    try:
        await client.admin.command("ping")
    except Exception:
        client.close()
        logger.error("Error connecting to database", exc_info=True)
        raise
    logger.info("Connected to database")
    return client


async def ensure_indexes(db: AsyncIOMotorDatabase):
    """Creates the indexes the repository queries rely on."""
    await db[USERS].create_index([("email", ASCENDING)], unique=True)

    await db[CLASSES].create_index([("teacherId", ASCENDING)])
    await db[CLASSES].create_index([("studentIds", ASCENDING)])

    # Not unique: plain creation may store several records per (class, student) pair.
    await db[ATTENDANCES].create_index([("classId", ASCENDING), ("studentId", ASCENDING)])
    await db[ATTENDANCES].create_index([("classId", ASCENDING), ("status", ASCENDING)])
    await db[ATTENDANCES].create_index([("studentId", ASCENDING)])
    await db[ATTENDANCES].create_index([("createdAt", DESCENDING)])
    logger.info("MongoDB indexes ensured.")
