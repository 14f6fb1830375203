"""
Tests for configuration, error rendering, log sanitising, storage and the
maintenance script.
"""
import logging
from datetime import timedelta

import pytest
from sqlalchemy import text

from jobhunt.core import config
from jobhunt.core.clock import utcnow
from jobhunt.core.errors import (
    ConcurrentUpdateError,
    ConfigurationError,
    ConflictError,
    JobInactiveError,
    NotFoundError,
    ValidationError,
)
from jobhunt.core.logging_config import sanitize_log_data, setup_logging
from jobhunt.db.models import Application, Job
from jobhunt.services import storage_service


def test_validate_config_requires_secret_key(monkeypatch):
    monkeypatch.setattr(config, "SECRET_KEY", None)
    with pytest.raises(ConfigurationError) as exc:
        config.validate_config()
    assert "SECRET_KEY" in str(exc.value)


def test_validate_config_requires_database_url_in_production(monkeypatch):
    monkeypatch.setattr(config, "ENV", "production")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(ConfigurationError) as exc:
        config.validate_config()
    assert "DATABASE_URL" in str(exc.value)


def test_validate_config_passes_with_required_settings():
    config.validate_config()


def test_error_payloads():
    assert ValidationError("bad", fields=["salary"]).to_dict() == {
        "message": "bad", "success": False, "fields": ["salary"],
    }
    assert ConcurrentUpdateError("retry").to_dict()["retryable"] is True
    assert isinstance(JobInactiveError("gone"), NotFoundError)
    assert JobInactiveError("gone").status_code == 410
    assert ConcurrentUpdateError("retry").status_code == ConflictError.status_code == 409


def test_sanitize_log_data_masks_secrets():
    sanitized = sanitize_log_data({
        "email": "asha@example.com",
        "phone_number": "9876543210",
        "password": "hunter22",
        "access_token": "t",
        "profile": {"api_key": "k", "fullname": "Asha Rao"},
        "role": "applicant",
    })
    assert sanitized == {
        "email": "a***@example.com",
        "phone_number": "***3210",
        "password": "***REDACTED***",
        "access_token": "***REDACTED***",
        "profile": {"api_key": "***REDACTED***", "fullname": "Asha Rao"},
        "role": "applicant",
    }


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_splits_errors_into_their_own_file(tmp_path, restore_root_logger):
    setup_logging("INFO", str(tmp_path))
    log = logging.getLogger("jobhunt.test")

    log.info("job archived")
    log.error("mail transport down")
    for handler in logging.getLogger().handlers:
        handler.flush()

    app_log = (tmp_path / "jobhunt.log").read_text()
    error_log = (tmp_path / "errors.log").read_text()
    assert "job archived" in app_log and "mail transport down" in app_log
    assert "mail transport down" in error_log
    assert "job archived" not in error_log


def test_safe_filename():
    assert storage_service.safe_filename("../../etc/passwd") == "passwd"
    assert storage_service.safe_filename("My CV (final).pdf") == "My_CV_final_.pdf"
    assert storage_service.safe_filename("") == "upload"


def test_save_upload_writes_file(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "UPLOAD_DIR", str(tmp_path))
    monkeypatch.setattr(config, "PUBLIC_BASE_URL", "https://cdn.example.com/")

    url = storage_service.save_upload(b"resume", "cv.pdf", "resume")

    assert url.startswith("https://cdn.example.com/uploads/resume/")
    stored = list((tmp_path / "resume").iterdir())
    assert len(stored) == 1 and stored[0].read_bytes() == b"resume"


@pytest.mark.parametrize("data, kind", [(b"", "resume"), (b"x", "video")])
def test_save_upload_rejects_bad_input(data, kind):
    with pytest.raises(ValidationError):
        storage_service.save_upload(data, "cv.pdf", kind)


def test_save_upload_rejects_large_files():
    with pytest.raises(ValidationError):
        storage_service.save_upload(b"x" * (storage_service.MAX_UPLOAD_BYTES + 1), "cv.pdf", "resume")


def test_run_maintenance(db, session_factory, make_job, applicant, make_application, monkeypatch):
    from scripts import run_maintenance as maintenance

    expired = make_job(deadline=utcnow() - timedelta(days=1))
    gone = make_job()
    make_application(gone, applicant)
    db.execute(text("DELETE FROM jobs WHERE id = :id"), {"id": gone.id})
    db.commit()

    monkeypatch.setattr(maintenance, "SessionLocal", session_factory)
    result = maintenance.run_maintenance()

    assert result == {"archived": 1, "purged": 1}
    db.expire_all()
    assert db.get(Job, expired.id).is_archived is True
    assert db.query(Application).count() == 0
