"""
Pydantic schemas for registration, login and profile endpoints.
"""
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator

from jobhunt.db.models.user import UserRole


class RegisterRequest(BaseModel):
    """Request schema for account registration."""
    fullname: str = Field(..., min_length=1, max_length=200, description="User's full name")
    email: EmailStr = Field(..., description="User's email address")
    phone_number: Optional[str] = Field(default=None, description="Contact number")
    password: str = Field(..., min_length=8, description="User's password (min 8 characters)")
    role: UserRole = Field(default=UserRole.APPLICANT, description="applicant or employer")

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """Validate password length in bytes (bcrypt limit is 72 bytes)."""
        password_bytes = v.encode("utf-8")
        if len(password_bytes) > 72:
            raise ValueError("Password too long (bcrypt limit 72 bytes)")
        if len(password_bytes) < 8:
            raise ValueError("Password must be at least 8 characters")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "fullname": "Asha Rao",
                "email": "asha.rao@example.com",
                "phone_number": "9876543210",
                "password": "SecurePass123",
                "role": "applicant"
            }
        }


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    """Public profile of a user."""
    id: int
    fullname: str
    email: EmailStr
    phone_number: Optional[str] = None
    role: UserRole
    resume_url: Optional[str] = None
    resume_original_name: Optional[str] = None
    bio: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    profile_photo_url: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
