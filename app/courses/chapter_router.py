from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.database import get_db
from app.courses import chapter_service as service
from app.courses.course_service import get_owned_course
from app.courses.media import MediaUploadError, get_media_store, upload_media
from app.courses.schemas import ChapterUpdate
from app.users.user_models import UserRole
from app.users.user_permissions import CurrentUser, get_current_user, require_roles

router = APIRouter(prefix="/courses/{course_id}/chapters", tags=["Chapters"])

ADD_DENIED = "Not authorized to add chapters to this course"
UPDATE_DENIED = "Not authorized to update chapters in this course"
DELETE_DENIED = "Not authorized to delete chapters from this course"
UPLOAD_DENIED = "Not authorized to upload videos to this course"


@router.get("")
async def list_chapters(
    course_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    chapters = await service.list_chapters(db, course_id)
    return {"success": True, "count": len(chapters), "data": chapters}


@router.post("", status_code=201)
async def create_chapter(
    course_id: str,
    title: str = Form(..., min_length=1, max_length=100),
    description: str = Form(..., min_length=1),
    order: int = Form(0),
    is_preview: bool = Form(False),
    video: Optional[UploadFile] = File(None),
    creator: CurrentUser = Depends(require_roles(UserRole.CREATOR, message=ADD_DENIED)),
    db: AsyncIOMotorDatabase = Depends(get_db),
    store=Depends(get_media_store)
):
    """
    Add a chapter, optionally uploading its video in the same request
    """
    await get_owned_course(db, course_id, creator, ADD_DENIED)

    data = {
        "title": title.strip(),
        "description": description.strip(),
        "order": order,
        "is_preview": is_preview,
    }
    if video is not None and video.filename:
        try:
            result = await upload_media(store, video, "video")
        except MediaUploadError:
            raise HTTPException(status_code=500, detail="Error uploading video file")
        data["video_url"] = result.url
        data["duration"] = result.duration

    chapter = await service.create_chapter(db, course_id, data)
    return {"success": True, "data": chapter}


@router.get("/{chapter_id}")
async def get_chapter(
    course_id: str,
    chapter_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return {"success": True, "data": await service.get_chapter(db, course_id, chapter_id)}


@router.put("/{chapter_id}")
async def update_chapter(
    course_id: str,
    chapter_id: str,
    data: ChapterUpdate,
    creator: CurrentUser = Depends(require_roles(UserRole.CREATOR, message=UPDATE_DENIED)),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    await get_owned_course(db, course_id, creator, UPDATE_DENIED)
    chapter = await service.update_chapter(db, course_id, chapter_id, data.model_dump(exclude_none=True))
    return {"success": True, "data": chapter}


@router.delete("/{chapter_id}")
async def delete_chapter(
    course_id: str,
    chapter_id: str,
    creator: CurrentUser = Depends(require_roles(UserRole.CREATOR, message=DELETE_DENIED)),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    await get_owned_course(db, course_id, creator, DELETE_DENIED)
    await service.delete_chapter(db, course_id, chapter_id)
    return {"success": True, "data": {}}


@router.post("/{chapter_id}/video")
async def upload_chapter_video(
    course_id: str,
    chapter_id: str,
    video: Optional[UploadFile] = File(None),
    creator: CurrentUser = Depends(require_roles(UserRole.CREATOR, message=UPLOAD_DENIED)),
    db: AsyncIOMotorDatabase = Depends(get_db),
    store=Depends(get_media_store)
):
    """
    Replace a chapter's video; the file goes to the media store and the
    returned URL is saved on the chapter
    """
    await get_owned_course(db, course_id, creator, UPLOAD_DENIED)
    await service.get_chapter(db, course_id, chapter_id)

    if video is None or not video.filename:
        raise HTTPException(status_code=400, detail="Please upload a video file")

    try:
        result = await upload_media(store, video, "video")
    except MediaUploadError:
        raise HTTPException(status_code=500, detail="Error uploading video file")

    chapter = await service.update_chapter(
        db, course_id, chapter_id,
        {"video_url": result.url, "duration": result.duration or None}
    )
    return {"success": True, "data": chapter}
