import logging
import re
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.database import clean_doc, generate_id, populate
from app.courses.chapter_service import get_chapter
from app.courses.course_service import get_course_or_404
from app.learning.models import Bookmark, Note
from app.users.user_permissions import CurrentUser

logger = logging.getLogger(__name__)


async def _check_targets(db: AsyncIOMotorDatabase, data: dict):
    await get_course_or_404(db, data["course_id"])
    if data.get("chapter_id"):
        await get_chapter(db, data["course_id"], data["chapter_id"])


async def _populate_refs(db: AsyncIOMotorDatabase, docs: List[dict], course_fields) -> List[dict]:
    await populate(db, docs, "courses", "course_id", "course", course_fields)
    await populate(db, docs, "chapters", "chapter_id", "chapter", ("title",))
    return docs

# ==================== BOOKMARKS ====================

async def create_bookmark(db: AsyncIOMotorDatabase, user: CurrentUser, data: dict) -> dict:
    await _check_targets(db, data)

    bookmark = Bookmark(bookmark_id=generate_id("BMK"), user_id=user.user_id, **data)
    doc = bookmark.model_dump()
    try:
        await db.bookmarks.insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Already bookmarked this content")

    return clean_doc(doc)


async def list_bookmarks(db: AsyncIOMotorDatabase, user: CurrentUser, course_id: Optional[str] = None) -> List[dict]:
    query = {"user_id": user.user_id}
    if course_id:
        query["course_id"] = course_id

    bookmarks = await db.bookmarks.find(
        query,
        {"_id": 0},
        sort=[("created_at", -1)]
    ).to_list(length=None)
    return await _populate_refs(db, bookmarks, ("title", "thumbnail"))


async def delete_bookmark(db: AsyncIOMotorDatabase, user: CurrentUser, bookmark_id: str):
    """Bookmarks of other users are reported as missing"""
    result = await db.bookmarks.delete_one({"bookmark_id": bookmark_id, "user_id": user.user_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Bookmark not found")

# ==================== NOTES ====================

async def create_note(db: AsyncIOMotorDatabase, user: CurrentUser, data: dict) -> dict:
    await _check_targets(db, data)

    note = Note(note_id=generate_id("NTE"), user_id=user.user_id, **data)
    doc = note.model_dump()
    await db.notes.insert_one(doc)
    return clean_doc(doc)


async def list_notes(
    db: AsyncIOMotorDatabase,
    user: CurrentUser,
    course_id: Optional[str] = None,
    chapter_id: Optional[str] = None
) -> List[dict]:
    query = {"user_id": user.user_id}
    if course_id:
        query["course_id"] = course_id
    if chapter_id:
        query["chapter_id"] = chapter_id

    notes = await db.notes.find(
        query,
        {"_id": 0},
        sort=[("created_at", -1)]
    ).to_list(length=None)
    return await _populate_refs(db, notes, ("title",))


async def list_chapter_notes(db: AsyncIOMotorDatabase, user: CurrentUser, chapter_id: str) -> List[dict]:
    """Caller's notes on one chapter in video order"""
    if not await db.chapters.find_one({"chapter_id": chapter_id}):
        raise HTTPException(status_code=404, detail="Chapter not found")

    return await db.notes.find(
        {"user_id": user.user_id, "chapter_id": chapter_id},
        {"_id": 0},
        sort=[("timestamp", 1)]
    ).to_list(length=None)


async def search_notes(db: AsyncIOMotorDatabase, user: CurrentUser, text: Optional[str] = None) -> List[dict]:
    query = {"user_id": user.user_id}
    if text:
        query["content"] = {"$regex": re.escape(text), "$options": "i"}

    return await db.notes.find(
        query,
        {"_id": 0},
        sort=[("created_at", -1)]
    ).to_list(length=None)


async def update_note(db: AsyncIOMotorDatabase, user: CurrentUser, note_id: str, updates: dict) -> dict:
    updates["updated_at"] = datetime.utcnow()
    note = await db.notes.find_one_and_update(
        {"note_id": note_id, "user_id": user.user_id},
        {"$set": updates},
        projection={"_id": 0},
        return_document=ReturnDocument.AFTER
    )
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")
    return note


async def delete_note(db: AsyncIOMotorDatabase, user: CurrentUser, note_id: str):
    result = await db.notes.delete_one({"note_id": note_id, "user_id": user.user_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Note not found")
    logger.info("Note %s deleted by %s", note_id, user.user_id)
