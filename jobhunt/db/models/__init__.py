"""
Database models module.

This module imports all database models to ensure they are registered with SQLAlchemy's Base.metadata
before table creation.

All models must be imported here to be included in database migrations and table creation.
"""
from jobhunt.db.models.user import User, UserRole
from jobhunt.db.models.company import Company
from jobhunt.db.models.job import Job
from jobhunt.db.models.application import Application, ApplicationStatus, InterviewMode

__all__ = [
    "User",
    "UserRole",
    "Company",
    "Job",
    "Application",
    "ApplicationStatus",
    "InterviewMode",
]
