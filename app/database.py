import logging
import secrets
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app import config

logger = logging.getLogger(__name__)

client = AsyncIOMotorClient(
    config.MONGO_URL,
    serverSelectionTimeoutMS=config.MONGO_CONNECT_TIMEOUT_MS,
    connectTimeoutMS=config.MONGO_CONNECT_TIMEOUT_MS,
)

HIDDEN_FIELDS = ("_id", "password_hash")


def get_database() -> AsyncIOMotorDatabase:
    return client[config.DB_NAME]


async def get_db() -> AsyncIOMotorDatabase:
    """Database dependency"""
    return get_database()


def generate_id(prefix: str) -> str:
    """Generate unique ID with prefix"""
    return f"{prefix}_{secrets.token_hex(8).upper()}"


def clean_doc(doc: Optional[dict]) -> Optional[dict]:
    """Strip Mongo internals and secrets before a document leaves the API"""
    if doc is None:
        return None
    for field in HIDDEN_FIELDS:
        doc.pop(field, None)
    return doc


def clean_docs(docs: List[dict]) -> List[dict]:
    return [clean_doc(doc) for doc in docs]


async def populate(
    db: AsyncIOMotorDatabase,
    docs: List[dict],
    collection: str,
    key: str,
    target: str,
    fields: Tuple[str, ...]
) -> List[dict]:
    """
    Attach a summary of the referenced document to each doc

    e.g. populate(db, notes, "courses", "course_id", "course", ("title",))
    sets note["course"] = {"course_id": ..., "title": ...}, or None when the
    reference is empty or dangling.
    """
    ids = list({d[key] for d in docs if d.get(key)})
    projection = {"_id": 0, key: 1, **{f: 1 for f in fields}}
    refs = await db[collection].find({key: {"$in": ids}}, projection).to_list(length=None) if ids else []
    by_id = {r[key]: r for r in refs}

    for doc in docs:
        doc[target] = by_id.get(doc.get(key))
    return docs


def paginate(page: int, limit: int) -> Tuple[int, int]:
    """Convert 1-based page/limit query values into (skip, limit)"""
    page = max(page, 1)
    limit = min(max(limit, 1), 100)
    return (page - 1) * limit, limit


def page_count(total: int, limit: int) -> int:
    return (total + limit - 1) // limit if limit else 0


# ==================== DATABASE INDEXES ====================

async def create_indexes(db: AsyncIOMotorDatabase):
    """
    Create database indexes for every collection
    Called during application startup
    """

    # Users
    await db.users.create_index("user_id", unique=True)
    await db.users.create_index("email", unique=True)

    # Courses
    await db.courses.create_index("course_id", unique=True)
    await db.courses.create_index("creator_id")
    await db.courses.create_index("category")
    await db.courses.create_index("status")

    # Chapters (ordering is advisory, so not unique)
    await db.chapters.create_index("chapter_id", unique=True)
    await db.chapters.create_index([("course_id", 1), ("order", 1)])

    # Enrollments
    await db.enrollments.create_index("enrollment_id", unique=True)
    await db.enrollments.create_index([("user_id", 1), ("course_id", 1)], unique=True)
    await db.enrollments.create_index("course_id")

    # Bookmarks
    await db.bookmarks.create_index("bookmark_id", unique=True)
    await db.bookmarks.create_index(
        [("user_id", 1), ("course_id", 1), ("chapter_id", 1)],
        unique=True
    )

    # Notes
    await db.notes.create_index("note_id", unique=True)
    await db.notes.create_index([("user_id", 1), ("course_id", 1)])
    await db.notes.create_index([("user_id", 1), ("chapter_id", 1)])

    # Profiles and achievements
    await db.user_profiles.create_index("user_id", unique=True)
    await db.user_achievements.create_index("achievement_id", unique=True)
    await db.user_achievements.create_index([("user_id", 1), ("type", 1)])
    await db.user_achievements.create_index([("user_id", 1), ("course_id", 1)])

    logger.info("Database indexes created")


async def ping(db: AsyncIOMotorDatabase) -> dict:
    return await db.command("ping")
