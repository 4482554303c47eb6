from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum

# ==================== ENUMS ====================

class CourseStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"

class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DROPPED = "dropped"

# ==================== DATABASE MODELS ====================

class Course(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    course_id: str  # CRS_XXXXXX
    title: str
    description: str
    creator_id: str  # USR_XXXXXX, fixed at creation
    price: float = Field(..., ge=0)
    thumbnail: str = ""
    status: CourseStatus = CourseStatus.DRAFT
    category: str
    tags: List[str] = []
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

class Chapter(BaseModel):
    chapter_id: str  # CHP_XXXXXX
    course_id: str
    title: str
    description: str
    video_url: str = ""
    duration: float = 0
    order: int = 0
    is_preview: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

class Enrollment(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    enrollment_id: str  # ENR_XXXXXX
    user_id: str
    course_id: str
    progress: float = Field(0, ge=0, le=100)
    completed_chapters: List[str] = []
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE
    enrolled_at: datetime = Field(default_factory=datetime.utcnow)
    last_accessed: datetime = Field(default_factory=datetime.utcnow)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


def status_for_progress(progress: float) -> EnrollmentStatus:
    """Exactly 100 completes an enrollment; anything else makes it active again"""
    return EnrollmentStatus.COMPLETED if progress == 100 else EnrollmentStatus.ACTIVE
