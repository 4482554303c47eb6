from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum

# ==================== ENUMS ====================

class UserRole(str, Enum):
    CREATOR = "creator"
    MEMBER = "member"

class AchievementType(str, Enum):
    COURSE_COMPLETION = "course_completion"
    CERTIFICATE = "certificate"
    BADGE = "badge"
    MILESTONE = "milestone"

# ==================== DATABASE MODELS ====================

class User(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    user_id: str  # USR_XXXXXX
    name: str
    email: str
    password_hash: str
    role: UserRole
    avatar: str = "default-avatar.png"
    verified: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)

class SocialLinks(BaseModel):
    twitter: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    youtube: Optional[str] = None

class Education(BaseModel):
    institution: str
    degree: str
    field: str
    start_year: int
    end_year: Optional[int] = None
    current: bool = False

class Experience(BaseModel):
    company: str
    position: str
    start_date: datetime
    end_date: Optional[datetime] = None
    current: bool = False
    description: Optional[str] = None

class ProfileAchievement(BaseModel):
    """Self-reported achievement listed on the profile page"""
    title: str
    description: str
    date: datetime

class Preferences(BaseModel):
    email_notifications: bool = True
    course_recommendations: bool = True
    community_updates: bool = True

class UserProfile(BaseModel):
    user_id: str
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    interests: List[str] = []
    skills: List[str] = []
    education: List[Education] = []
    experience: List[Experience] = []
    achievements: List[ProfileAchievement] = []
    preferences: Preferences = Field(default_factory=Preferences)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

class UserAchievement(BaseModel):
    """Achievement earned on the platform, optionally tied to a course"""
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    achievement_id: str  # ACH_XXXXXX
    user_id: str
    type: AchievementType
    title: str
    description: str
    course_id: Optional[str] = None
    image: Optional[str] = None
    date_earned: datetime = Field(default_factory=datetime.utcnow)
    metadata: Dict[str, Any] = {}
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
