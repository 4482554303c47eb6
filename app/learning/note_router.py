from typing import Optional

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.database import get_db
from app.learning import learning_service as service
from app.learning.schemas import NoteCreate, NoteUpdate
from app.users.user_permissions import CurrentUser, get_current_user

router = APIRouter(prefix="/notes", tags=["Notes"])


@router.post("", status_code=201)
async def create_note(
    data: NoteCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.create_note(db, user, data.model_dump())


@router.get("")
async def get_notes(
    course_id: Optional[str] = None,
    chapter_id: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_notes(db, user, course_id, chapter_id)


@router.get("/chapter/{chapter_id}")
async def get_chapter_notes(
    chapter_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_chapter_notes(db, user, chapter_id)


@router.get("/search")
async def search_notes(
    query: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.search_notes(db, user, query)


@router.patch("/{note_id}")
async def update_note(
    note_id: str,
    data: NoteUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.update_note(db, user, note_id, data.model_dump(exclude_none=True))


@router.delete("/{note_id}")
async def delete_note(
    note_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    await service.delete_note(db, user, note_id)
    return {"message": "Note deleted successfully"}
