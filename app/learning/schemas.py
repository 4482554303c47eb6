from pydantic import BaseModel, Field, field_validator
from typing import Optional

# ==================== REQUEST SCHEMAS ====================

class BookmarkCreate(BaseModel):
    course_id: str = Field(..., min_length=1)
    chapter_id: Optional[str] = None
    note: Optional[str] = None

    @field_validator('note')
    @classmethod
    def strip_note(cls, v):
        return v.strip() if v is not None else v

class NoteCreate(BaseModel):
    course_id: str = Field(..., min_length=1)
    chapter_id: Optional[str] = None
    content: str
    timestamp: Optional[float] = Field(None, ge=0)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        if not v or not v.strip():
            raise ValueError('Note content is required')
        return v.strip()

class NoteUpdate(BaseModel):
    content: Optional[str] = None
    timestamp: Optional[float] = Field(None, ge=0)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Note content is required')
        return v.strip() if v is not None else v
