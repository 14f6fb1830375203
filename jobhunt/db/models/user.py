from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, JSON
from jobhunt.core.clock import utcnow
import enum
from jobhunt.db.base import Base


class UserRole(str, enum.Enum):
    """Account types."""
    APPLICANT = "applicant"
    EMPLOYER = "employer"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    fullname = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone_number = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=UserRole.APPLICANT,
    )

    # Blob-store URL of the uploaded resume; applying requires one
    resume_url = Column(String, nullable=True)
    resume_original_name = Column(String, nullable=True)

    # Profile
    bio = Column(Text, nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    profile_photo_url = Column(String, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    @property
    def has_resume(self) -> bool:
        return bool(self.resume_url)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
