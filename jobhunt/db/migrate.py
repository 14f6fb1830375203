"""
Database migration runner for Alembic migrations.
"""
import logging
from pathlib import Path
from alembic.config import Config
from alembic import command
from sqlalchemy import create_engine, text

logger = logging.getLogger(__name__)

ADVISORY_LOCK_ID = 482913057
ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


def run_migrations():
    """
    Run Alembic migrations to head revision.

    On PostgreSQL an advisory lock keeps concurrently starting workers from
    migrating at the same time.
    """
    from jobhunt.core import config as app_config

    logger.info("RUN_MIGRATIONS=1 -> running alembic upgrade head")

    alembic_cfg = Config(str(ALEMBIC_INI))
    alembic_cfg.set_main_option("script_location", str(ALEMBIC_INI.parent / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", app_config.DATABASE_URL)

    is_postgres = app_config.DATABASE_URL.startswith("postgresql")
    engine = create_engine(app_config.DATABASE_URL, pool_pre_ping=True)
    lock_conn = None

    try:
        if is_postgres:
            lock_conn = engine.connect()
            lock_conn.execute(text(f"SELECT pg_advisory_lock({ADVISORY_LOCK_ID})"))
            lock_conn.commit()
            logger.info("Migration lock acquired")

        command.upgrade(alembic_cfg, "head")
        logger.info("Migrations complete")

    except Exception:
        logger.exception("Migration failed")
        raise
    finally:
        if lock_conn is not None:
            lock_conn.execute(text(f"SELECT pg_advisory_unlock({ADVISORY_LOCK_ID})"))
            lock_conn.commit()
            lock_conn.close()
        engine.dispose()
