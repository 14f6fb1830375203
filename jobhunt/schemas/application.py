"""
Pydantic schemas for application endpoints.
"""
from typing import Any, List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from jobhunt.db.models.application import ApplicationStatus
from jobhunt.schemas.job import JobResponse


class StatusUpdateRequest(BaseModel):
    """Status change requested by the job's employer."""
    status: Optional[str] = Field(None, description="Target status")
    interview_date: Any = Field(None, alias="interviewDate", description="Interview date (ISO-8601)")
    interview_time: Optional[str] = Field(None, alias="interviewTime", description="e.g. 10:00")
    mode: Optional[str] = Field(None, description="online or onsite")
    location: Optional[str] = Field(None, description="Required for onsite interviews")
    meeting_link: Optional[str] = Field(None, alias="meetingLink", description="Required for online interviews")
    notes: Optional[str] = Field(None, description="Free-text notes for the candidate")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "status": "interview_scheduled",
                "interviewDate": "2025-06-01",
                "interviewTime": "10:00",
                "mode": "online",
                "meetingLink": "https://meet.example.com/abc",
                "notes": "Please join five minutes early."
            }
        }


class InterviewResponse(BaseModel):
    date: Optional[datetime] = None
    time: str = ""
    mode: Optional[str] = None
    location: str = ""
    meeting_link: str = ""
    notes: str = ""


class ApplicantSummary(BaseModel):
    id: int
    fullname: str
    email: str
    phone_number: Optional[str] = None
    resume_url: Optional[str] = None
    resume_original_name: Optional[str] = None

    class Config:
        from_attributes = True


class ApplicationResponse(BaseModel):
    id: int
    job_id: Optional[int] = None
    applicant_id: int
    status: ApplicationStatus
    interview: InterviewResponse
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AppliedJobResponse(ApplicationResponse):
    """An applicant's own application with the job it targets."""
    job: Optional[JobResponse] = None


class ApplicantApplicationResponse(ApplicationResponse):
    """An application as seen by the employer."""
    applicant: Optional[ApplicantSummary] = None


class ApplicationEnvelope(BaseModel):
    message: str
    application: ApplicationResponse
    success: bool = True


class AppliedJobListResponse(BaseModel):
    applications: List[AppliedJobResponse]
    success: bool = True


class ApplicantListResponse(BaseModel):
    job_id: int
    applications: List[ApplicantApplicationResponse]
    success: bool = True


class StatusUpdateResponse(BaseModel):
    message: str
    application: ApplicationResponse
    previous_status: ApplicationStatus
    notification: Optional[str] = Field(None, description="Notification sent to the applicant, if any")
    warning: Optional[str] = None
    success: bool = True
