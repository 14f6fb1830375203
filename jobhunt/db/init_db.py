import logging

from jobhunt.db.session import engine
from jobhunt.db.base import Base
import jobhunt.db.models  # noqa: F401  registers every table on Base.metadata

logger = logging.getLogger(__name__)


def init_db(bind=None):
    """Create any missing tables (used when migrations are not run)."""
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")
