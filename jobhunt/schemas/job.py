"""
Pydantic schemas for job endpoints.

Request fields are deliberately loose (strings, numbers or lists) because the
job lifecycle engine parses them itself and reports field-specific messages.
"""
from typing import Any, List, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class JobCreate(BaseModel):
    """Schema for posting a new job. Every field is required."""
    title: Any = Field(None, description="Job title")
    description: Any = Field(None, description="Job description")
    requirements: Any = Field(None, description="List of requirements or a comma-separated string")
    location: Any = Field(None, description="City or region")
    location_type: Any = Field(None, description="remote, hybrid or onsite")
    job_type: Any = Field(None, description="full-time, part-time, internship, ...")
    experience_level: Any = Field(None, description="Years of experience (>= 0)")
    position: Any = Field(None, description="Number of open positions (> 0)")
    salary: Any = Field(None, description="Salary in LPA, e.g. 12 or \"12.5 LPA\"")
    deadline: Any = Field(None, description="Application deadline (ISO-8601)")
    company_id: Any = Field(None, description="Company ID")

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Backend Engineer",
                "description": "Build and run our hiring APIs.",
                "requirements": ["Python", "SQL", "REST APIs"],
                "location": "Bengaluru",
                "location_type": "hybrid",
                "job_type": "full-time",
                "experience_level": 2,
                "position": 3,
                "salary": "12 LPA",
                "deadline": "2026-12-31T23:59:59Z",
                "company_id": 1
            }
        }


class JobUpdate(JobCreate):
    """Schema for editing a job. Only the fields sent are considered."""
    pass


class JobResponse(BaseModel):
    """Schema for job response."""
    id: int = Field(..., description="Job ID")
    created_by: int = Field(..., description="Employer who posted the job")
    company_id: int
    company_name: Optional[str] = None
    title: str
    description: str
    requirements: List[str]
    location: str
    location_type: str
    job_type: str
    experience_level: int
    position: int
    salary: float
    deadline: datetime
    is_archived: bool
    archived_at: Optional[datetime] = None
    application_lock_activated_at: Optional[datetime] = None
    is_locked: bool = False
    core_requirements: List[str] = Field(default_factory=list)
    locked_salary: Optional[float] = None
    application_ids: List[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class JobListResponse(BaseModel):
    """Schema for list of jobs response."""
    jobs: List[JobResponse] = Field(..., description="List of jobs")
    total: int = Field(..., description="Total number of jobs")
    page: int = Field(1, description="Current page number")
    page_size: int = Field(20, description="Number of items per page")
    success: bool = True

    class Config:
        json_schema_extra = {
            "example": {
                "jobs": [],
                "total": 0,
                "page": 1,
                "page_size": 20,
                "success": True
            }
        }


class JobEnvelope(BaseModel):
    message: str
    job: JobResponse
    success: bool = True
