from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from jobhunt.core.clock import utcnow
from sqlalchemy.orm import relationship
from jobhunt.db.base import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    website = Column(String, nullable=True)
    location = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    owner = relationship("User", backref="companies")

    def __repr__(self):
        return f"<Company(id={self.id}, name='{self.name}')>"
