"""
Job posting model.

A job starts fully editable. The first application (or the first edit made
while applications exist) snapshots a lock: core requirements and salary are
frozen and the structural fields become immutable. Jobs past their deadline
are archived, never deleted.
"""
from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from jobhunt.core.clock import utcnow
from jobhunt.db.base import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)

    # Posting content
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    requirements = Column(JSON, nullable=False, default=list)  # ordered list of strings
    location = Column(String, nullable=False)
    location_type = Column(String, nullable=False)  # e.g. "remote", "hybrid", "onsite"
    job_type = Column(String, nullable=False)  # e.g. "full-time", "internship"
    experience_level = Column(Integer, nullable=False)
    position = Column(Integer, nullable=False)
    salary = Column(Float, nullable=False)  # LPA
    deadline = Column(DateTime, nullable=False)

    # Archival (monotonic false -> true)
    is_archived = Column(Boolean, nullable=False, default=False)
    archived_at = Column(DateTime, nullable=True)

    # Lock snapshot, set at most once
    application_lock_activated_at = Column(DateTime, nullable=True)
    core_requirements = Column(JSON, nullable=False, default=list)
    locked_salary = Column(Float, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    company = relationship("Company", backref="jobs")
    employer = relationship("User", backref="posted_jobs")
    applications = relationship(
        "Application",
        back_populates="job",
        order_by="Application.id",
    )

    __table_args__ = (
        Index("idx_jobs_archive_sweep", "is_archived", "deadline"),
        Index("idx_jobs_employer_created", "created_by", "created_at"),
    )

    @property
    def is_locked(self) -> bool:
        return self.application_lock_activated_at is not None

    @property
    def application_ids(self):
        return [application.id for application in self.applications]

    @property
    def company_name(self):
        return self.company.name if self.company else None

    def __repr__(self):
        return f"<Job(id={self.id}, title='{self.title}', archived={self.is_archived})>"
