from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from app.users.user_models import (
    UserRole, SocialLinks, Education, Experience, ProfileAchievement, Preferences
)

# ==================== REQUEST SCHEMAS ====================

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        if not v.strip():
            raise ValueError('Please add a name')
        return v.strip()

class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    bio: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = None
    website: Optional[str] = None
    social_links: Optional[SocialLinks] = None
    interests: Optional[List[str]] = None
    skills: Optional[List[str]] = None
    education: Optional[List[Education]] = None
    experience: Optional[List[Experience]] = None
    achievements: Optional[List[ProfileAchievement]] = None
    preferences: Optional[Preferences] = None

class PreferencesUpdate(BaseModel):
    preferences: Preferences

# ==================== RESPONSE SCHEMAS ====================

class UserOut(BaseModel):
    user_id: str
    name: str
    email: str
    role: UserRole

class AuthResponse(BaseModel):
    success: bool = True
    token: str
    user: UserOut

class MeResponse(BaseModel):
    success: bool = True
    user: UserOut
