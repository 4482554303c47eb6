import json
import logging
import re
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.database import clean_doc, generate_id, paginate, page_count
from app.courses.models import Course, CourseStatus
from app.users.user_permissions import CurrentUser, ensure_owner

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("created_at", "updated_at", "price", "title")


def parse_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    """
    Normalize tags sent as repeated form fields, a JSON array string,
    or a comma-separated string
    """
    if not tags:
        return None
    if len(tags) > 1:
        return [t.strip() for t in tags if t.strip()]

    raw = tags[0].strip()
    try:
        parsed = json.loads(raw)
        if isinstance(parsed, list):
            return [str(t).strip() for t in parsed if str(t).strip()]
    except ValueError:
        pass
    return [t.strip() for t in raw.split(",") if t.strip()]


def text_search_filter(search: Optional[str]) -> dict:
    """Case-insensitive match on title or description"""
    if not search:
        return {}
    pattern = re.escape(search)
    return {"$or": [
        {"title": {"$regex": pattern, "$options": "i"}},
        {"description": {"$regex": pattern, "$options": "i"}}
    ]}


async def populate_creators(db: AsyncIOMotorDatabase, courses: List[dict], fields=("name", "email")) -> List[dict]:
    """Replace creator_id with a {user_id, name, email} summary under 'creator'"""
    creator_ids = list({c["creator_id"] for c in courses})
    projection = {"_id": 0, "user_id": 1, **{f: 1 for f in fields}}
    users = await db.users.find({"user_id": {"$in": creator_ids}}, projection).to_list(length=None)
    by_id = {u["user_id"]: u for u in users}

    for course in courses:
        course["creator"] = by_id.get(course["creator_id"], {"user_id": course["creator_id"]})
    return courses


async def find_courses(
    db: AsyncIOMotorDatabase,
    query: dict,
    page: int,
    limit: int,
    sort_field: str = "created_at"
) -> dict:
    """Paginated course listing shared by the catalogue and discovery endpoints"""
    skip, limit = paginate(page, limit)
    courses = await db.courses.find(
        query,
        {"_id": 0},
        sort=[(sort_field, -1)],
        skip=skip,
        limit=limit
    ).to_list(length=None)
    total = await db.courses.count_documents(query)

    await populate_creators(db, courses)
    return {
        "courses": courses,
        "total": total,
        "pages": page_count(total, limit),
        "current_page": max(page, 1)
    }


async def list_courses(
    db: AsyncIOMotorDatabase,
    page: int = 1,
    limit: int = 10,
    category: Optional[str] = None,
    status: Optional[CourseStatus] = None,
    search: Optional[str] = None
) -> dict:
    query = text_search_filter(search)
    if category:
        query["category"] = category
    if status:
        query["status"] = status.value
    return await find_courses(db, query, page, limit)


async def create_course(db: AsyncIOMotorDatabase, creator: CurrentUser, data: dict) -> dict:
    course = Course(
        course_id=generate_id("CRS"),
        creator_id=creator.user_id,
        **data
    )
    doc = course.model_dump()
    await db.courses.insert_one(doc)

    logger.info("Course %s created by %s", course.course_id, creator.user_id)
    return clean_doc(doc)


async def get_course_or_404(db: AsyncIOMotorDatabase, course_id: str) -> dict:
    course = await db.courses.find_one({"course_id": course_id}, {"_id": 0})
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return course


async def get_owned_course(db: AsyncIOMotorDatabase, course_id: str, user: CurrentUser, message: str) -> dict:
    """Course lookup followed by the creator ownership check"""
    course = await get_course_or_404(db, course_id)
    ensure_owner(course, "creator_id", user, message)
    return course


async def get_course_chapters(db: AsyncIOMotorDatabase, course_id: str) -> List[dict]:
    return await db.chapters.find(
        {"course_id": course_id},
        {"_id": 0},
        sort=[("order", 1), ("created_at", 1)]
    ).to_list(length=None)


async def get_course_detail(db: AsyncIOMotorDatabase, course_id: str) -> dict:
    """
    Course with creator, ordered chapters and enrollment count

    Chapters and enrollments are read from their own collections, so the
    course document never carries a copy that could drift.
    """
    course = await get_course_or_404(db, course_id)
    await populate_creators(db, [course])
    course["chapters"] = await get_course_chapters(db, course_id)
    course["enrolled_count"] = await db.enrollments.count_documents({"course_id": course_id})
    return course


async def get_creator_courses(db: AsyncIOMotorDatabase, creator: CurrentUser) -> List[dict]:
    courses = await db.courses.find(
        {"creator_id": creator.user_id},
        {"_id": 0},
        sort=[("created_at", -1)]
    ).to_list(length=None)
    return await populate_creators(db, courses)


async def update_course(db: AsyncIOMotorDatabase, course_id: str, updates: dict) -> dict:
    """Apply a partial update; creator_id is never part of the update set"""
    updates = {k: v for k, v in updates.items() if v is not None and k != "creator_id"}
    if isinstance(updates.get("status"), CourseStatus):
        updates["status"] = updates["status"].value
    updates["updated_at"] = datetime.utcnow()

    course = await db.courses.find_one_and_update(
        {"course_id": course_id},
        {"$set": updates},
        projection={"_id": 0},
        return_document=ReturnDocument.AFTER
    )
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return course


async def delete_course(db: AsyncIOMotorDatabase, course_id: str):
    """Chapters and enrollments of the course are left in place"""
    result = await db.courses.delete_one({"course_id": course_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Course not found")
    logger.info("Course %s deleted", course_id)


async def get_course_preview(db: AsyncIOMotorDatabase, course_id: str) -> dict:
    course = await get_course_or_404(db, course_id)
    if course.get("status") != CourseStatus.PUBLISHED.value:
        raise HTTPException(status_code=403, detail="Course preview not available")

    await populate_creators(db, [course], fields=("name",))
    chapters = await get_course_chapters(db, course_id)
    preview_chapter = next((c for c in chapters if c.get("is_preview")), None)
    if preview_chapter is None and chapters:
        preview_chapter = chapters[0]

    return {
        "course_id": course["course_id"],
        "title": course["title"],
        "description": course["description"],
        "thumbnail": course.get("thumbnail", ""),
        "price": course["price"],
        "category": course["category"],
        "tags": course.get("tags", []),
        "status": course["status"],
        "creator": course["creator"],
        "total_chapters": len(chapters),
        "preview_chapter": clean_doc(preview_chapter)
    }
