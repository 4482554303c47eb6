"""
Enrollment Router
Course discovery, enrollment and progress tracking
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.database import get_db
from app.courses import enrollment_service as service
from app.courses.models import EnrollmentStatus
from app.courses.schemas import PaginatedCourses, ProgressUpdate
from app.users.user_permissions import CurrentUser, get_current_user

router = APIRouter(prefix="/enrollments", tags=["Enrollments"])


@router.get("/discover", response_model=PaginatedCourses)
async def discover_courses(
    category: Optional[str] = None,
    search: Optional[str] = None,
    tags: Optional[List[str]] = Query(None),
    sort: str = "created_at",
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.discover_courses(db, category, search, tags, sort, page, limit)


@router.post("/courses/{course_id}/enroll", status_code=201)
async def enroll_in_course(
    course_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.enroll(db, user, course_id)


@router.get("/enrolled")
async def get_enrolled_courses(
    status: Optional[EnrollmentStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_user_enrollments(db, user.user_id, status, page, limit)


@router.patch("/enrollments/{enrollment_id}/progress")
async def update_progress(
    enrollment_id: str,
    data: ProgressUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.update_progress(db, user, enrollment_id, data.progress)
