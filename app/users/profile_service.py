import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.database import clean_doc, generate_id, populate
from app.users.user_models import AchievementType, UserAchievement, UserProfile
from app.users.user_permissions import CurrentUser
from app.users.user_schemas import ProfileUpdate

logger = logging.getLogger(__name__)

USER_FIELDS = ("name", "email")


async def _upsert_profile(db: AsyncIOMotorDatabase, user_id: str, updates: dict) -> dict:
    """
    Set the given profile fields, creating the profile with defaults
    for everything else on first write
    """
    now = datetime.utcnow()
    defaults = UserProfile(user_id=user_id).model_dump()
    for field in list(updates) + ["updated_at"]:
        defaults.pop(field, None)

    return await db.user_profiles.find_one_and_update(
        {"user_id": user_id},
        {
            "$set": {**updates, "updated_at": now},
            "$setOnInsert": defaults
        },
        projection={"_id": 0},
        upsert=True,
        return_document=ReturnDocument.AFTER
    )


async def get_profile(db: AsyncIOMotorDatabase, user: CurrentUser) -> dict:
    """User record, profile, achievements and enrollment stats in one payload"""
    account = await db.users.find_one({"user_id": user.user_id}, {"_id": 0, "password_hash": 0})
    if not account:
        raise HTTPException(status_code=404, detail="User not found")

    profile = await db.user_profiles.find_one({"user_id": user.user_id}, {"_id": 0})
    achievements = await db.user_achievements.find(
        {"user_id": user.user_id},
        {"_id": 0},
        sort=[("date_earned", -1)]
    ).to_list(length=None)

    enrollments = await db.enrollments.find(
        {"user_id": user.user_id},
        {"_id": 0, "status": 1}
    ).to_list(length=None)

    return {
        "user": account,
        "profile": profile,
        "achievements": achievements,
        "stats": {
            "total_enrollments": len(enrollments),
            "completed_courses": sum(1 for e in enrollments if e.get("status") == "completed"),
            "in_progress_courses": sum(1 for e in enrollments if e.get("status") == "active"),
        }
    }


async def update_profile(db: AsyncIOMotorDatabase, user: CurrentUser, data: ProfileUpdate) -> dict:
    updates = data.model_dump(exclude_none=True)
    account_updates = {f: updates.pop(f) for f in USER_FIELDS if f in updates}

    if "email" in account_updates:
        account_updates["email"] = account_updates["email"].lower()
        taken = await db.users.find_one({
            "email": account_updates["email"],
            "user_id": {"$ne": user.user_id}
        })
        if taken:
            raise HTTPException(status_code=400, detail="Email already in use")

    if account_updates:
        await db.users.update_one({"user_id": user.user_id}, {"$set": account_updates})
        logger.info("Account details updated for %s", user.user_id)

    return await _upsert_profile(db, user.user_id, updates)


async def update_preferences(db: AsyncIOMotorDatabase, user: CurrentUser, preferences: dict) -> dict:
    profile = await _upsert_profile(db, user.user_id, {"preferences": preferences})
    return profile["preferences"]


async def get_achievements(db: AsyncIOMotorDatabase, user_id: str, achievement_type: Optional[AchievementType] = None):
    query = {"user_id": user_id}
    if achievement_type:
        query["type"] = achievement_type.value

    achievements = await db.user_achievements.find(
        query,
        {"_id": 0},
        sort=[("date_earned", -1)]
    ).to_list(length=None)
    return await populate(db, achievements, "courses", "course_id", "course", ("title", "thumbnail"))


async def award_course_completion(db: AsyncIOMotorDatabase, user_id: str, course_id: str):
    """Record a course_completion achievement, at most once per (user, course)"""
    course = await db.courses.find_one({"course_id": course_id}, {"_id": 0, "title": 1})
    title = course["title"] if course else course_id

    achievement = UserAchievement(
        achievement_id=generate_id("ACH"),
        user_id=user_id,
        type=AchievementType.COURSE_COMPLETION,
        title=f"Completed {title}",
        description=f"Finished every chapter of {title}",
        course_id=course_id
    )
    result = await db.user_achievements.update_one(
        {"user_id": user_id, "type": AchievementType.COURSE_COMPLETION.value, "course_id": course_id},
        {"$setOnInsert": achievement.model_dump()},
        upsert=True
    )
    if result.upserted_id is not None:
        logger.info("Awarded course completion for %s to %s", course_id, user_id)
    return clean_doc(achievement.model_dump())
