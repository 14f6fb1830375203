from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, Index, UniqueConstraint
from sqlalchemy.orm import relationship
import enum
from jobhunt.core.clock import utcnow
from jobhunt.db.base import Base


class ApplicationStatus(str, enum.Enum):
    """Hiring pipeline stages."""
    PENDING = "pending"
    SHORTLISTED = "shortlisted"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_RESCHEDULED = "interview_rescheduled"
    INTERVIEW_COMPLETED = "interview_completed"
    REJECTED = "rejected"
    HIRED = "hired"


class InterviewMode(str, enum.Enum):
    ONLINE = "online"
    ONSITE = "onsite"


def _enum_values(members):
    return [member.value for member in members]


class Application(Base):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    # SET NULL so a removed job leaves an orphan for purge_orphaned_applications
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="SET NULL"), nullable=True, index=True)
    applicant_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(
        Enum(ApplicationStatus, name="application_status", values_callable=_enum_values),
        nullable=False,
        default=ApplicationStatus.PENDING,
    )

    # Interview detail, populated only while an interview is on the books
    interview_date = Column(DateTime, nullable=True)
    interview_time = Column(String, nullable=False, default="")
    interview_mode = Column(
        Enum(InterviewMode, name="interview_mode", values_callable=_enum_values),
        nullable=True,
    )
    interview_location = Column(String, nullable=False, default="")
    interview_meeting_link = Column(String, nullable=False, default="")
    interview_notes = Column(Text, nullable=False, default="")

    # Optimistic concurrency for status transitions
    version = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    job = relationship("Job", back_populates="applications")
    applicant = relationship("User", backref="applications")

    __table_args__ = (
        UniqueConstraint("job_id", "applicant_id", name="uq_application_job_applicant"),
        Index("idx_applications_applicant_created", "applicant_id", "created_at"),
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def interview(self) -> dict:
        return {
            "date": self.interview_date,
            "time": self.interview_time or "",
            "mode": self.interview_mode.value if self.interview_mode else None,
            "location": self.interview_location or "",
            "meeting_link": self.interview_meeting_link or "",
            "notes": self.interview_notes or "",
        }

    def __repr__(self):
        return f"<Application(id={self.id}, job_id={self.job_id}, status='{self.status}')>"
