"""
Read-side projections of jobs, users and companies.

The engines only see these narrow views rather than walking ORM
relationships themselves.
"""
from dataclasses import dataclass
from typing import Optional
from sqlalchemy.orm import Session

from jobhunt.db.models.user import User
from jobhunt.db.models.company import Company
from jobhunt.db.models.job import Job

DEFAULT_APPLICANT_NAME = "Candidate"
DEFAULT_JOB_TITLE = "this role"
DEFAULT_COMPANY_NAME = "our company"


@dataclass(frozen=True)
class ApplicantContact:
    user_id: int
    email: Optional[str]
    display_name: str
    has_resume: bool


@dataclass(frozen=True)
class JobContext:
    """What a notification needs to know about a job."""
    job_id: int
    owner_id: int
    title: str
    company_name: str
    salary: Optional[float]


def get_job_owner(db: Session, job_id: int) -> Optional[int]:
    row = db.query(Job.created_by).filter(Job.id == job_id).first()
    return row[0] if row else None


def get_applicant_contact(db: Session, applicant_id: int) -> Optional[ApplicantContact]:
    user = db.query(User).filter(User.id == applicant_id).first()
    if not user:
        return None
    return ApplicantContact(
        user_id=user.id,
        email=user.email or None,
        display_name=user.fullname or DEFAULT_APPLICANT_NAME,
        has_resume=user.has_resume,
    )


def get_company_name(db: Session, company_id: int) -> Optional[str]:
    row = db.query(Company.name).filter(Company.id == company_id).first()
    return row[0] if row else None


def get_job_context(db: Session, job_id: int) -> Optional[JobContext]:
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        return None
    return JobContext(
        job_id=job.id,
        owner_id=job.created_by,
        title=job.title or DEFAULT_JOB_TITLE,
        company_name=get_company_name(db, job.company_id) or DEFAULT_COMPANY_NAME,
        salary=job.salary,
    )
