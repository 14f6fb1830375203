import os

# ✅ Environment
ENV = os.getenv("ENV", "development")
APP_NAME = os.getenv("APP_NAME", "JobHunt")

# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./jobhunt.db")
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "10"))
DB_STATEMENT_TIMEOUT_MS = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "10000"))
RUN_MIGRATIONS = os.getenv("RUN_MIGRATIONS", "0") == "1"

# ✅ Security
SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

# ✅ SMTP
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASS = os.getenv("SMTP_PASS")
SMTP_FROM = os.getenv("SMTP_FROM") or SMTP_USER
SMTP_TIMEOUT = float(os.getenv("SMTP_TIMEOUT", "10"))
MAIL_SUPPRESS_SEND = os.getenv("MAIL_SUPPRESS_SEND", "0") == "1"

# ✅ Blob storage
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")

# ✅ HTTP
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

# ✅ Logging / maintenance
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")
ORPHAN_CLEANUP_ENABLED = os.getenv("ORPHAN_CLEANUP_ENABLED", "1") == "1"


def validate_config() -> None:
    """
    Refuse to start without the settings the service cannot run without.

    Raises:
        ConfigurationError: listing every missing setting
    """
    from jobhunt.core.errors import ConfigurationError

    missing = []
    if not SECRET_KEY:
        missing.append("SECRET_KEY")
    if ENV == "production" and not os.getenv("DATABASE_URL"):
        missing.append("DATABASE_URL")

    if missing:
        raise ConfigurationError(
            f"Missing required configuration: {', '.join(missing)}"
        )


def smtp_configured() -> bool:
    """Check whether outbound email can be delivered."""
    return bool(SMTP_HOST and SMTP_USER and SMTP_PASS)
