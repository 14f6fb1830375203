"""
Shared fixtures: in-memory database, API client, recording notifier and
factories for users, companies, jobs and applications.
"""
import os
import tempfile

# Settings are read at import time, so they must be in place first
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("MAIL_SUPPRESS_SEND", "1")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="jobhunt-uploads-"))
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="jobhunt-logs-"))

import pytest
from datetime import timedelta
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobhunt.main import app
from jobhunt.core.clock import utcnow
from jobhunt.core.security import create_access_token, hash_password
from jobhunt.db.base import Base
from jobhunt.db.models import Application, ApplicationStatus, Company, Job, User, UserRole
from jobhunt.db.session import get_db
from jobhunt.services.notification_service import Notifier, get_notifier


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

TEST_PASSWORD = "testpass123"
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


class RecordingNotifier(Notifier):
    """Notifier that records every send instead of emailing."""

    def __init__(self):
        self.sent = []
        self.fail_with = None

    def _record(self, kind, **payload):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append((kind, payload))

    def send_interview_scheduled(self, to, applicant_name, job_title, company_name, interview):
        self._record("interview_scheduled", to=to, applicant_name=applicant_name,
                     job_title=job_title, company_name=company_name, interview=interview)

    def send_interview_rescheduled(self, to, applicant_name, job_title, company_name, interview):
        self._record("interview_rescheduled", to=to, applicant_name=applicant_name,
                     job_title=job_title, company_name=company_name, interview=interview)

    def send_rejected(self, to, applicant_name, job_title, company_name):
        self._record("rejected", to=to, applicant_name=applicant_name,
                     job_title=job_title, company_name=company_name)

    def send_hired(self, to, applicant_name, job_title, company_name, salary):
        self._record("hired", to=to, applicant_name=applicant_name,
                     job_title=job_title, company_name=company_name, salary=salary)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def session_factory():
    return TestSessionLocal


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(db, notifier):
    """API client bound to the test database and the recording notifier."""

    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role=UserRole.APPLICANT, email=None, fullname=None, resume=True):
        counter["n"] += 1
        user = User(
            fullname=fullname or f"Test User {counter['n']}",
            email=email if email is not None else f"user{counter['n']}@example.com",
            password_hash=TEST_PASSWORD_HASH,
            role=role,
            resume_url=f"http://localhost:8000/uploads/resume/cv{counter['n']}.pdf" if resume else None,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def employer(make_user):
    return make_user(role=UserRole.EMPLOYER, fullname="Hiring Manager", resume=False)


@pytest.fixture
def applicant(make_user):
    return make_user(role=UserRole.APPLICANT, fullname="Asha Rao")


@pytest.fixture
def company(db, employer):
    company = Company(name="Acme Labs", user_id=employer.id, location="Pune")
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


@pytest.fixture
def make_job(db, employer, company):
    def _make_job(**overrides):
        values = dict(
            created_by=employer.id,
            company_id=company.id,
            title="Backend Engineer",
            description="Build hiring APIs.",
            requirements=["Python", "SQL", "REST", "Docker", "Git"],
            core_requirements=[],
            location="Bengaluru",
            location_type="hybrid",
            job_type="full-time",
            experience_level=2,
            position=3,
            salary=10.0,
            deadline=utcnow() + timedelta(days=30),
        )
        values.update(overrides)
        job = Job(**values)
        db.add(job)
        db.commit()
        db.refresh(job)
        return job

    return _make_job


@pytest.fixture
def job(make_job):
    return make_job()


@pytest.fixture
def make_application(db):
    def _make_application(job, applicant, status=ApplicationStatus.PENDING, **interview):
        application = Application(job_id=job.id, applicant_id=applicant.id, status=status, **interview)
        db.add(application)
        db.commit()
        db.refresh(application)
        return application

    return _make_application


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
