import logging
from datetime import datetime
from typing import List

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.database import clean_doc, generate_id
from app.courses.models import Chapter
from app.courses.course_service import get_course_chapters

logger = logging.getLogger(__name__)


async def create_chapter(db: AsyncIOMotorDatabase, course_id: str, data: dict) -> dict:
    """Insert a chapter; the course document itself is not modified"""
    chapter = Chapter(chapter_id=generate_id("CHP"), course_id=course_id, **data)
    doc = chapter.model_dump()
    await db.chapters.insert_one(doc)

    logger.info("Chapter %s added to course %s", chapter.chapter_id, course_id)
    return clean_doc(doc)


async def list_chapters(db: AsyncIOMotorDatabase, course_id: str) -> List[dict]:
    return await get_course_chapters(db, course_id)


async def get_chapter(db: AsyncIOMotorDatabase, course_id: str, chapter_id: str) -> dict:
    chapter = await db.chapters.find_one(
        {"chapter_id": chapter_id, "course_id": course_id},
        {"_id": 0}
    )
    if not chapter:
        raise HTTPException(status_code=404, detail="Chapter not found")
    return chapter


async def update_chapter(db: AsyncIOMotorDatabase, course_id: str, chapter_id: str, updates: dict) -> dict:
    updates = {k: v for k, v in updates.items() if v is not None}
    updates["updated_at"] = datetime.utcnow()

    chapter = await db.chapters.find_one_and_update(
        {"chapter_id": chapter_id, "course_id": course_id},
        {"$set": updates},
        projection={"_id": 0},
        return_document=ReturnDocument.AFTER
    )
    if not chapter:
        raise HTTPException(status_code=404, detail="Chapter not found")
    return chapter


async def delete_chapter(db: AsyncIOMotorDatabase, course_id: str, chapter_id: str):
    result = await db.chapters.delete_one({"chapter_id": chapter_id, "course_id": course_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Chapter not found")
    logger.info("Chapter %s deleted from course %s", chapter_id, course_id)
