"""
Pydantic schemas for company endpoints.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Company name (unique)")
    description: Optional[str] = Field(None, description="About the company")
    website: Optional[str] = Field(None, description="Company website")
    location: Optional[str] = Field(None, description="Headquarters")


class CompanyResponse(BaseModel):
    id: int
    name: str
    user_id: int
    description: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    logo_url: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
