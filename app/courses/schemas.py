import math

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from app.courses.models import CourseStatus

# ==================== REQUEST SCHEMAS ====================

class CourseStatusUpdate(BaseModel):
    status: CourseStatus

class ChapterUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    video_url: Optional[str] = None
    duration: Optional[float] = Field(None, ge=0)
    is_preview: Optional[bool] = None
    order: Optional[int] = None

    @field_validator('title', 'description')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if v is not None else v

class ProgressUpdate(BaseModel):
    progress: float

    @field_validator('progress', mode='before')
    @classmethod
    def require_finite_number(cls, v):
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
            raise ValueError('Progress must be between 0 and 100')
        return v

# ==================== RESPONSE SCHEMAS ====================

class PaginatedCourses(BaseModel):
    courses: List[dict]
    total: int
    pages: int
    current_page: int
