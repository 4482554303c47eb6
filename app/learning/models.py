from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

# ==================== DATABASE MODELS ====================

class Bookmark(BaseModel):
    bookmark_id: str  # BMK_XXXXXX
    user_id: str
    course_id: str
    chapter_id: Optional[str] = None  # None bookmarks the whole course
    note: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

class Note(BaseModel):
    note_id: str  # NTE_XXXXXX
    user_id: str
    course_id: str
    chapter_id: Optional[str] = None
    content: str
    timestamp: Optional[float] = Field(None, ge=0)  # seconds into the chapter video
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
