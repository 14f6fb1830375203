"""
Applying to jobs and reading applications back.
"""
import logging
from typing import List, Optional
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from jobhunt.core.errors import (
    AuthorizationError,
    ConflictError,
    DuplicateApplicationError,
    NotFoundError,
    ValidationError,
)
from jobhunt.db.models.application import Application
from jobhunt.db.models.job import Job
from jobhunt.services.directory import get_applicant_contact
from jobhunt.services.job_lifecycle import archive_expired_jobs, initialize_applicant_locks

logger = logging.getLogger(__name__)


def find_existing_application(db: Session, job_id: int, applicant_id: int) -> Optional[Application]:
    return db.query(Application).filter(
        Application.job_id == job_id,
        Application.applicant_id == applicant_id,
    ).first()


def apply_to_job(db: Session, job_id: int, applicant_id: int) -> Application:
    """
    Submit an application for a job.

    The job must still be open, the applicant must have a resume on file and
    must not have applied before. The application insert and the job's lock
    snapshot commit together. The (job, applicant) unique constraint closes
    the race between the duplicate check and the insert.

    Raises:
        NotFoundError: unknown job or applicant
        ConflictError: job archived
        DuplicateApplicationError: applicant already applied
        ValidationError: applicant has no resume
    """
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise NotFoundError("Job not found.")

    archive_expired_jobs(db, job_id=job_id)
    db.refresh(job)
    if job.is_archived:
        raise ConflictError("This job has been archived and is no longer accepting applications.")

    if find_existing_application(db, job_id, applicant_id):
        raise DuplicateApplicationError("You have already applied for this job.")

    contact = get_applicant_contact(db, applicant_id)
    if not contact:
        raise NotFoundError("User not found.")
    if not contact.has_resume:
        raise ValidationError(
            "Please upload your resume in your profile before applying.",
            fields=["resume"],
        )

    application = Application(job_id=job_id, applicant_id=applicant_id)
    db.add(application)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Duplicate application rejected by store: job_id={job_id}, applicant_id={applicant_id}")
        raise DuplicateApplicationError("You have already applied for this job.")

    initialize_applicant_locks(db, job)
    db.commit()
    db.refresh(application)

    logger.info(f"Application created: application_id={application.id}, job_id={job_id}, applicant_id={applicant_id}")
    return application


def purge_orphaned_applications(db: Session, applicant_id: Optional[int] = None) -> int:
    """
    Delete applications whose job no longer exists.

    Args:
        db: Database session (committed on return)
        applicant_id: Only purge this applicant's applications

    Returns:
        Number of applications deleted
    """
    live_jobs = select(Job.id)
    query = db.query(Application).filter(
        or_(Application.job_id.is_(None), Application.job_id.notin_(live_jobs))
    )
    if applicant_id is not None:
        query = query.filter(Application.applicant_id == applicant_id)

    removed = query.delete(synchronize_session=False)
    db.commit()

    if removed:
        logger.info(f"Orphaned applications removed: count={removed}, applicant_id={applicant_id}")
    return removed


def list_applied_jobs(db: Session, applicant_id: int, purge_orphans: bool = True) -> List[Application]:
    """The applicant's applications with their jobs, newest first."""
    if purge_orphans:
        purge_orphaned_applications(db, applicant_id=applicant_id)

    return (
        db.query(Application)
        .options(joinedload(Application.job).joinedload(Job.company))
        .filter(Application.applicant_id == applicant_id, Application.job_id.isnot(None))
        .order_by(Application.created_at.desc(), Application.id.desc())
        .all()
    )


def list_applicants(db: Session, job_id: int, employer_id: int) -> List[Application]:
    """
    Applications received for a job, newest first.

    Raises:
        NotFoundError: unknown job
        AuthorizationError: caller did not create the job
    """
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise NotFoundError("Job not found.")
    if job.created_by != employer_id:
        raise AuthorizationError("You are not authorized to view applicants for this job.")

    return (
        db.query(Application)
        .options(joinedload(Application.applicant))
        .filter(Application.job_id == job_id)
        .order_by(Application.created_at.desc(), Application.id.desc())
        .all()
    )
