from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.database import get_db
from app.courses import course_service as service
from app.courses.media import MediaUploadError, get_media_store, upload_media
from app.courses.models import CourseStatus
from app.courses.schemas import CourseStatusUpdate, PaginatedCourses
from app.users.user_models import UserRole
from app.users.user_permissions import CurrentUser, get_current_user, require_roles

router = APIRouter(prefix="/courses", tags=["Courses"])

creator_only = require_roles(UserRole.CREATOR)


async def _upload_thumbnail(store, thumbnail: Optional[UploadFile]) -> Optional[str]:
    if thumbnail is None or not thumbnail.filename:
        return None
    try:
        result = await upload_media(store, thumbnail, "image")
    except MediaUploadError:
        raise HTTPException(status_code=500, detail="Error uploading thumbnail")
    return result.url


# ==================== CATALOGUE ====================

@router.get("", response_model=PaginatedCourses)
async def list_courses(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[str] = None,
    status: Optional[CourseStatus] = None,
    search: Optional[str] = None,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    List courses, newest first, with optional category/status/search filters
    """
    return await service.list_courses(db, page, limit, category, status, search)


@router.post("", status_code=201)
async def create_course(
    title: str = Form(..., min_length=1, max_length=100),
    description: str = Form(..., min_length=1),
    category: str = Form(..., min_length=1),
    price: float = Form(..., ge=0),
    tags: Optional[List[str]] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    creator: CurrentUser = Depends(creator_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
    store=Depends(get_media_store)
):
    """
    Create a draft course owned by the calling creator
    """
    data = {
        "title": title.strip(),
        "description": description.strip(),
        "category": category.strip(),
        "price": price,
        "tags": service.parse_tags(tags) or [],
    }
    thumbnail_url = await _upload_thumbnail(store, thumbnail)
    if thumbnail_url:
        data["thumbnail"] = thumbnail_url

    course = await service.create_course(db, creator, data)
    course["creator"] = {"user_id": creator.user_id, "name": creator.name, "email": creator.email}
    return course


@router.get("/creator/courses")
async def get_creator_courses(
    creator: CurrentUser = Depends(creator_only),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    courses = await service.get_creator_courses(db, creator)
    return {"success": True, "count": len(courses), "data": courses}


# ==================== SINGLE COURSE ====================

@router.get("/{course_id}")
async def get_course(course_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.get_course_detail(db, course_id)


@router.patch("/{course_id}")
async def update_course(
    course_id: str,
    title: Optional[str] = Form(None, min_length=1, max_length=100),
    description: Optional[str] = Form(None, min_length=1),
    category: Optional[str] = Form(None, min_length=1),
    price: Optional[float] = Form(None, ge=0),
    status: Optional[CourseStatus] = Form(None),
    tags: Optional[List[str]] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    creator: CurrentUser = Depends(creator_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
    store=Depends(get_media_store)
):
    """
    Partial update by the owning creator
    """
    await service.get_owned_course(db, course_id, creator, "Not authorized to update this course")

    updates = {
        "title": title.strip() if title else None,
        "description": description.strip() if description else None,
        "category": category.strip() if category else None,
        "price": price,
        "status": status,
        "tags": service.parse_tags(tags),
        "thumbnail": await _upload_thumbnail(store, thumbnail),
    }
    return await service.update_course(db, course_id, updates)


@router.delete("/{course_id}")
async def delete_course(
    course_id: str,
    creator: CurrentUser = Depends(creator_only),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    await service.get_owned_course(db, course_id, creator, "Not authorized to delete this course")
    await service.delete_course(db, course_id)
    return {"success": True, "message": "Course deleted successfully"}


@router.patch("/{course_id}/status")
async def update_course_status(
    course_id: str,
    data: CourseStatusUpdate,
    creator: CurrentUser = Depends(creator_only),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    await service.get_owned_course(db, course_id, creator, "Not authorized to update this course")
    course = await service.update_course(db, course_id, {"status": data.status})
    return {"success": True, "data": course}


@router.get("/{course_id}/preview")
async def get_course_preview(
    course_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Public-facing summary of a published course
    """
    return {"success": True, "data": await service.get_course_preview(db, course_id)}
