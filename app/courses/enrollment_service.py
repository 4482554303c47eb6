import math
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.database import clean_doc, generate_id, paginate, page_count, populate
from app.courses.course_service import SORTABLE_FIELDS, find_courses, get_course_or_404, text_search_filter
from app.courses.models import Enrollment, EnrollmentStatus, status_for_progress
from app.users.profile_service import award_course_completion
from app.users.user_permissions import CurrentUser, ensure_owner

logger = logging.getLogger(__name__)

COURSE_SUMMARY_FIELDS = ("title", "description", "thumbnail", "price", "category", "status", "creator_id")


async def discover_courses(
    db: AsyncIOMotorDatabase,
    category: Optional[str] = None,
    search: Optional[str] = None,
    tags: Optional[List[str]] = None,
    sort: str = "created_at",
    page: int = 1,
    limit: int = 10
) -> dict:
    query = text_search_filter(search)
    if category:
        query["category"] = category
    if tags:
        query["tags"] = {"$all": tags}

    sort_field = sort if sort in SORTABLE_FIELDS else "created_at"
    return await find_courses(db, query, page, limit, sort_field)


async def enroll(db: AsyncIOMotorDatabase, user: CurrentUser, course_id: str) -> dict:
    """
    Enroll the caller in a course

    Only the enrollment document is written. Whether a user is enrolled, and
    how many students a course has, is always read from this collection.
    """
    await get_course_or_404(db, course_id)

    if user.is_creator:
        raise HTTPException(status_code=403, detail="Creators cannot enroll in courses")

    if await db.enrollments.find_one({"user_id": user.user_id, "course_id": course_id}):
        raise HTTPException(status_code=400, detail="Already enrolled in this course")

    enrollment = Enrollment(
        enrollment_id=generate_id("ENR"),
        user_id=user.user_id,
        course_id=course_id
    )
    doc = enrollment.model_dump()
    try:
        await db.enrollments.insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Already enrolled in this course")

    logger.info("User %s enrolled in course %s", user.user_id, course_id)
    return clean_doc(doc)


async def list_user_enrollments(
    db: AsyncIOMotorDatabase,
    user_id: str,
    status: Optional[EnrollmentStatus] = None,
    page: int = 1,
    limit: int = 10,
    course_fields=COURSE_SUMMARY_FIELDS
) -> dict:
    """Paginated enrollments, most recently accessed first, with course summaries"""
    query = {"user_id": user_id}
    if status:
        query["status"] = status.value

    skip, limit = paginate(page, limit)
    enrollments = await db.enrollments.find(
        query,
        {"_id": 0},
        sort=[("last_accessed", -1)],
        skip=skip,
        limit=limit
    ).to_list(length=None)
    total = await db.enrollments.count_documents(query)

    await populate(db, enrollments, "courses", "course_id", "course", course_fields)
    return {
        "enrollments": enrollments,
        "total": total,
        "pages": page_count(total, limit),
        "current_page": max(page, 1)
    }


async def update_progress(
    db: AsyncIOMotorDatabase,
    user: CurrentUser,
    enrollment_id: str,
    progress: float
) -> dict:
    """
    Set progress and derive status from it

    Exactly 100 marks the enrollment completed. Any other value marks it
    active, including for enrollments that were completed or dropped.
    """
    if not math.isfinite(progress) or progress < 0 or progress > 100:
        raise HTTPException(status_code=400, detail="Progress must be between 0 and 100")

    enrollment = await db.enrollments.find_one({"enrollment_id": enrollment_id}, {"_id": 0})
    if not enrollment:
        raise HTTPException(status_code=404, detail="Enrollment not found")

    ensure_owner(enrollment, "user_id", user, "Not authorized to update this enrollment")

    previous_status = enrollment.get("status")
    new_status = status_for_progress(progress)
    if new_status == EnrollmentStatus.ACTIVE and previous_status != EnrollmentStatus.ACTIVE.value:
        # TODO: decide whether completed/dropped enrollments may be reopened by a lower progress value
        logger.warning(
            "Enrollment %s moved from %s back to active (progress %s)",
            enrollment_id, previous_status, progress
        )

    now = datetime.utcnow()
    updated = await db.enrollments.find_one_and_update(
        {"enrollment_id": enrollment_id},
        {"$set": {
            "progress": progress,
            "status": new_status.value,
            "last_accessed": now,
            "updated_at": now
        }},
        projection={"_id": 0},
        return_document=ReturnDocument.AFTER
    )

    if new_status == EnrollmentStatus.COMPLETED and previous_status != EnrollmentStatus.COMPLETED.value:
        await award_course_completion(db, user.user_id, enrollment["course_id"])

    return updated
