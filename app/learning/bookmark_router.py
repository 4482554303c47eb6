from typing import Optional

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.database import get_db
from app.learning import learning_service as service
from app.learning.schemas import BookmarkCreate
from app.users.user_permissions import CurrentUser, get_current_user

router = APIRouter(prefix="/bookmarks", tags=["Bookmarks"])


@router.post("", status_code=201)
async def create_bookmark(
    data: BookmarkCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.create_bookmark(db, user, data.model_dump())


@router.get("")
async def get_bookmarks(
    course_id: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_bookmarks(db, user, course_id)


@router.delete("/{bookmark_id}")
async def delete_bookmark(
    bookmark_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    await service.delete_bookmark(db, user, bookmark_id)
    return {"message": "Bookmark removed successfully"}
