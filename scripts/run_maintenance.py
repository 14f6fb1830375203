"""
Archive expired jobs and purge applications whose job is gone.
Run: python -m scripts.run_maintenance [--skip-purge]
"""
import argparse
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from jobhunt.db.session import SessionLocal
from jobhunt.services.application_service import purge_orphaned_applications
from jobhunt.services.job_lifecycle import archive_expired_jobs

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def run_maintenance(purge: bool = True) -> dict:
    """Run the archival sweep and, optionally, the orphan purge."""
    db = SessionLocal()
    try:
        archived = archive_expired_jobs(db)
        purged = purge_orphaned_applications(db) if purge else 0
        logger.info(f"Maintenance complete: archived={archived}, purged={purged}")
        return {"archived": archived, "purged": purged}
    except Exception:
        db.rollback()
        logger.error("Maintenance failed", exc_info=True)
        raise
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--skip-purge", action="store_true", help="Only run the archival sweep")
    args = parser.parse_args()

    result = run_maintenance(purge=not args.skip_purge)
    print(f"\n[DONE] archived {result['archived']} job(s), purged {result['purged']} application(s)")
