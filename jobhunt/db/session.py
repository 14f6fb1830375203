from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from jobhunt.core import config


def _engine_options(url: str) -> dict:
    """Bounded waits so no store call blocks indefinitely."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False, "timeout": config.DB_POOL_TIMEOUT}}

    options = {
        "pool_pre_ping": True,
        "pool_timeout": config.DB_POOL_TIMEOUT,
    }
    if url.startswith("postgresql"):
        options["connect_args"] = {
            "connect_timeout": config.DB_POOL_TIMEOUT,
            "options": f"-c statement_timeout={config.DB_STATEMENT_TIMEOUT_MS}",
        }
    return options


DATABASE_URL = config.DATABASE_URL

engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
