from typing import Optional

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.database import get_db
from app.courses.enrollment_service import list_user_enrollments
from app.courses.models import EnrollmentStatus
from app.users import profile_service as service
from app.users.user_models import AchievementType
from app.users.user_permissions import CurrentUser, get_current_user
from app.users.user_schemas import PreferencesUpdate, ProfileUpdate

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("")
async def get_profile(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.get_profile(db, user)


@router.patch("")
async def update_profile(
    data: ProfileUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Update account name/email and upsert the extended profile
    """
    return await service.update_profile(db, user, data)


@router.patch("/preferences")
async def update_preferences(
    data: PreferencesUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.update_preferences(db, user, data.preferences.model_dump())


@router.get("/achievements")
async def get_achievements(
    type: Optional[AchievementType] = None,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.get_achievements(db, user.user_id, type)


@router.get("/enrollments")
async def get_enrollment_history(
    status: Optional[EnrollmentStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await list_user_enrollments(
        db, user.user_id, status, page, limit,
        course_fields=("title", "thumbnail")
    )
