"""
Logging configuration for the JobHunt API.

Console output plus two rotating files under LOG_DIR: ``jobhunt.log`` with
everything at the configured level and ``errors.log`` with ERROR and above.
Payloads should pass through sanitize_log_data before they are logged so
credentials never reach disk and applicant contact details are masked.
"""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

APP_LOG = "jobhunt.log"
ERROR_LOG = "errors.log"
MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUPS = 5

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

SENSITIVE_KEYS = ("password", "token", "secret", "key", "smtp_pass", "database_url")
CONTACT_KEYS = ("email", "phone")
REDACTED = "***REDACTED***"


def _rotating_handler(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(log_level: str = "INFO", log_dir: str = "logs"):
    """
    Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for the rotating log files
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))

    logger.addHandler(console_handler)
    logger.addHandler(_rotating_handler(log_path / APP_LOG, level))
    logger.addHandler(_rotating_handler(log_path / ERROR_LOG, logging.ERROR))

    # Third-party noise
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)
    logging.getLogger("fastapi_mail").setLevel(logging.WARNING)


def mask_contact(value: str) -> str:
    """Keep just enough of an email address or phone number to tell them apart."""
    if "@" in value:
        local, _, domain = value.partition("@")
        return f"{local[:1]}***@{domain}"
    return f"***{value[-4:]}" if len(value) > 4 else "***"


def sanitize_log_data(data: dict) -> dict:
    """
    Redact sensitive values before a payload is logged.

    Secret-looking keys are replaced outright, email and phone values are
    masked, nested dictionaries are sanitized the same way.

    Args:
        data: Dictionary to sanitize

    Returns:
        Sanitized copy of the dictionary
    """
    sanitized = {}
    for key, value in data.items():
        lowered = str(key).lower()
        if any(sensitive in lowered for sensitive in SENSITIVE_KEYS):
            sanitized[key] = REDACTED
        elif isinstance(value, dict):
            sanitized[key] = sanitize_log_data(value)
        elif isinstance(value, str) and value and any(contact in lowered for contact in CONTACT_KEYS):
            sanitized[key] = mask_contact(value)
        else:
            sanitized[key] = value
    return sanitized
