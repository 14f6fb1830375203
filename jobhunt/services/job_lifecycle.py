"""
Job lifecycle engine.

Owns the mutability rules of a job posting:
- archival once the deadline has passed (conditional bulk update, idempotent)
- the application lock snapshot (core requirements + salary, set once)
- what an employer may still edit once candidates have applied
"""
import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import or_, and_
from sqlalchemy.orm import Session

from jobhunt.core.clock import utcnow
from jobhunt.core.errors import (
    AuthorizationError,
    ConflictError,
    JobInactiveError,
    LockedFieldError,
    NotFoundError,
    ValidationError,
)
from jobhunt.core.validators import (
    normalize_text,
    parse_deadline,
    parse_experience,
    parse_position,
    parse_requirements,
    parse_salary,
)
from jobhunt.db.models.application import Application
from jobhunt.db.models.company import Company
from jobhunt.db.models.job import Job
from jobhunt.db.models.user import User, UserRole

logger = logging.getLogger(__name__)

# Fields frozen once the posting is locked; text compared trimmed, numbers as integers
LOCKED_FIELDS = (
    "title",
    "location",
    "location_type",
    "job_type",
    "experience_level",
    "position",
    "company_id",
)
TEXT_FIELDS = ("title", "description", "location", "location_type", "job_type")
LOCKED_NUMBER_PARSERS = {
    "experience_level": parse_experience,
    "position": parse_position,
    "company_id": parse_position,
}

CORE_REQUIREMENT_RATIO = 0.7
SALARY_BAND = 0.15
MIN_LOCKED_REQUIREMENTS = 2
MAX_LOCKED_REQUIREMENTS = 10


# ============================================
# Archival
# ============================================

def archive_expired_jobs(
    db: Session,
    employer_id: Optional[int] = None,
    job_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> int:
    """
    Archive every job whose deadline has passed.

    Runs as one conditional UPDATE keyed on ``is_archived = false AND
    deadline < now``, so concurrent sweeps converge: whichever commits first
    archives the row and the others match nothing.

    Args:
        db: Database session (committed on return)
        employer_id: Limit the sweep to one employer's jobs
        job_id: Limit the sweep to a single job
        now: Reference time, defaults to the current UTC time

    Returns:
        Number of jobs archived by this call
    """
    now = now or utcnow()
    query = db.query(Job).filter(
        Job.is_archived.is_(False),
        Job.deadline < now,
    )
    if employer_id is not None:
        query = query.filter(Job.created_by == employer_id)
    if job_id is not None:
        query = query.filter(Job.id == job_id)

    archived = query.update(
        {Job.is_archived: True, Job.archived_at: now},
        synchronize_session="fetch",
    )
    db.commit()

    if archived:
        logger.info(
            f"Archived expired jobs: count={archived}, employer_id={employer_id}, job_id={job_id}"
        )
    return archived


# ============================================
# Application lock
# ============================================

def core_requirement_count(requirement_count: int) -> int:
    """Leading share of requirements frozen at lock time (70%, rounded up)."""
    return math.ceil(requirement_count * 7 / 10)


def initialize_applicant_locks(db: Session, job: Job, now: Optional[datetime] = None) -> bool:
    """
    Snapshot the lock on a job if it has not been taken yet.

    The snapshot is written with ``WHERE application_lock_activated_at IS
    NULL`` so only one writer wins a race. The caller owns the commit, which
    lets the apply path insert the application and lock in one transaction.

    Returns:
        True if this call activated the lock, False if it was already set
    """
    if job.application_lock_activated_at is not None:
        return False

    now = now or utcnow()
    requirements = list(job.requirements or [])
    core_requirements = requirements[:core_requirement_count(len(requirements))]

    activated = db.query(Job).filter(
        Job.id == job.id,
        Job.application_lock_activated_at.is_(None),
    ).update(
        {
            Job.application_lock_activated_at: now,
            Job.core_requirements: core_requirements,
            Job.locked_salary: job.salary,
        },
        synchronize_session="fetch",
    )

    if not activated:
        # Another request locked it first; pick up its snapshot
        db.refresh(job)
        return False

    logger.info(
        f"Application lock activated: job_id={job.id}, "
        f"core_requirements={len(core_requirements)}/{len(requirements)}, locked_salary={job.salary}"
    )
    return True


def salary_bounds(locked_salary: float) -> Tuple[float, float]:
    """Allowed salary range once locked: +/-15%, rounded to 2 decimals."""
    return (
        round(locked_salary * (1 - SALARY_BAND), 2),
        round(locked_salary * (1 + SALARY_BAND), 2),
    )


# ============================================
# Queries
# ============================================

def _get_job_or_404(db: Session, job_id: int) -> Job:
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise NotFoundError("Job not found.")
    return job


def get_job(db: Session, job_id: int) -> Job:
    """
    Fetch a job for public viewing, archiving it first if it has expired.

    Raises:
        NotFoundError: unknown job
        JobInactiveError: job is archived
    """
    _get_job_or_404(db, job_id)
    archive_expired_jobs(db, job_id=job_id)

    job = _get_job_or_404(db, job_id)
    if job.is_archived:
        raise JobInactiveError("This job is no longer active.")
    return job


def list_jobs(
    db: Session,
    keyword: Optional[str] = None,
    include_archived: bool = False,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[Job], int]:
    """
    Search jobs, newest first.

    Keyword matching is case-insensitive over title, description, location,
    job type and location type. Archived and expired jobs are hidden unless
    ``include_archived`` is set.
    """
    archive_expired_jobs(db)

    query = db.query(Job)
    if not include_archived:
        query = query.filter(
            and_(Job.is_archived.is_(False), Job.deadline >= utcnow())
        )

    keyword = normalize_text(keyword)
    if keyword:
        search_term = f"%{keyword}%"
        query = query.filter(
            or_(
                Job.title.ilike(search_term),
                Job.description.ilike(search_term),
                Job.location.ilike(search_term),
                Job.job_type.ilike(search_term),
                Job.location_type.ilike(search_term),
            )
        )

    total = query.count()
    offset = (page - 1) * page_size
    jobs = query.order_by(Job.created_at.desc(), Job.id.desc()).offset(offset).limit(page_size).all()

    logger.debug(f"Jobs listed: keyword={keyword!r}, total={total}, page={page}")
    return jobs, total


def get_employer_jobs(db: Session, employer_id: int) -> List[Job]:
    """Every job the employer created, archived ones included, newest first."""
    archive_expired_jobs(db, employer_id=employer_id)
    return (
        db.query(Job)
        .filter(Job.created_by == employer_id)
        .order_by(Job.created_at.desc(), Job.id.desc())
        .all()
    )


# ============================================
# Create / update
# ============================================

def _raise_if_errors(errors: Dict[str, str]) -> None:
    if errors:
        raise ValidationError(" ".join(errors.values()), fields=list(errors))


def _company_exists(db: Session, company_id: Any) -> bool:
    try:
        company_id = int(company_id)
    except (TypeError, ValueError):
        return False
    return db.query(Company.id).filter(Company.id == company_id).first() is not None


def create_job(db: Session, employer_id: int, data: Dict[str, Any]) -> Job:
    """
    Create a job posting.

    Every field is required. Requirements may be a list or a delimited
    string and must contain at least one entry.

    Raises:
        AuthorizationError: caller is not an employer
        ValidationError: one or more fields are missing or malformed
        NotFoundError: company does not exist
    """
    employer = db.query(User).filter(User.id == employer_id).first()
    if not employer:
        raise NotFoundError("User not found.")
    if employer.role != UserRole.EMPLOYER:
        raise AuthorizationError("Only employers can post jobs.")

    errors: Dict[str, str] = {}
    values: Dict[str, Any] = {}

    for field in TEXT_FIELDS:
        text = normalize_text(data.get(field))
        if not text:
            errors[field] = f"{field} is required."
        values[field] = text

    requirements = parse_requirements(data.get("requirements"))
    if not requirements.ok:
        errors["requirements"] = requirements.error
    elif not requirements.value:
        errors["requirements"] = "At least one requirement is required."

    parsers = {
        "salary": parse_salary,
        "experience_level": parse_experience,
        "position": parse_position,
        "deadline": parse_deadline,
    }
    for field, parser in parsers.items():
        result = parser(data.get(field))
        if result.ok:
            values[field] = result.value
        else:
            errors[field] = result.error

    if data.get("company_id") in (None, ""):
        errors["company_id"] = "company_id is required."

    _raise_if_errors(errors)

    if not _company_exists(db, data["company_id"]):
        raise NotFoundError("Company not found.")

    job = Job(
        created_by=employer_id,
        company_id=int(data["company_id"]),
        requirements=requirements.value,
        core_requirements=[],
        **values,
    )
    db.add(job)
    db.commit()
    db.refresh(job)

    logger.info(f"Job created: job_id={job.id}, employer_id={employer_id}, company_id={job.company_id}")
    return job


def _has_applications(db: Session, job_id: int) -> bool:
    return db.query(Application.id).filter(Application.job_id == job_id).first() is not None


def _locked_field_changed(job: Job, field: str, value: Any) -> bool:
    current = getattr(job, field)
    parser = LOCKED_NUMBER_PARSERS.get(field)
    if parser is None:
        return normalize_text(value) != normalize_text(current)
    result = parser(value)
    return not result.ok or result.value != current


def update_job(db: Session, job_id: int, employer_id: int, changes: Dict[str, Any]) -> Job:
    """
    Apply an employer's edit to a job.

    Only keys present in ``changes`` are considered. Once the job has
    applications the structural fields must match their current values,
    requirements must number 2-10 and salary must stay within 15% of the
    locked salary. Every check runs before anything is written.

    Raises:
        NotFoundError: unknown job
        AuthorizationError: caller did not create the job
        ConflictError: job is archived
        LockedFieldError: a locked field would change
        ValidationError: a field is malformed or out of range
    """
    job = _get_job_or_404(db, job_id)

    if job.created_by != employer_id:
        logger.warning(f"Job edit refused: job_id={job_id}, employer_id={employer_id} is not the owner")
        raise AuthorizationError("You are not authorized to update this job.")

    archive_expired_jobs(db, job_id=job.id)
    db.refresh(job)
    if job.is_archived:
        raise ConflictError("This job has been archived and can no longer be edited.")

    locked = _has_applications(db, job.id)
    if locked and initialize_applicant_locks(db, job):
        db.commit()

    if locked:
        changed = [
            field for field in LOCKED_FIELDS
            if field in changes and _locked_field_changed(job, field, changes[field])
        ]
        if changed:
            logger.warning(f"Locked field edit refused: job_id={job.id}, fields={changed}")
            raise LockedFieldError(
                f"These fields cannot be changed once candidates have applied: {', '.join(changed)}.",
                fields=changed,
            )

    errors: Dict[str, str] = {}
    updates: Dict[str, Any] = {}

    editable_text = ("description",) if locked else TEXT_FIELDS
    for field in editable_text:
        if field in changes:
            text = normalize_text(changes[field])
            if text:
                updates[field] = text
            else:
                errors[field] = f"{field} cannot be empty."

    if "requirements" in changes:
        result = parse_requirements(changes["requirements"])
        if not result.ok:
            errors["requirements"] = result.error
        elif locked and not MIN_LOCKED_REQUIREMENTS <= len(result.value) <= MAX_LOCKED_REQUIREMENTS:
            errors["requirements"] = (
                f"Requirements must contain between {MIN_LOCKED_REQUIREMENTS} and "
                f"{MAX_LOCKED_REQUIREMENTS} items once candidates have applied."
            )
        elif not result.value:
            errors["requirements"] = "At least one requirement is required."
        else:
            updates["requirements"] = result.value

    if "salary" in changes:
        result = parse_salary(changes["salary"])
        if not result.ok:
            errors["salary"] = result.error
        elif locked:
            reference = job.locked_salary if job.is_locked else job.salary
            low, high = salary_bounds(reference)
            if low <= result.value <= high:
                updates["salary"] = result.value
            else:
                errors["salary"] = (
                    f"Salary must stay between {low:g} and {high:g} LPA once candidates have applied."
                )
        else:
            updates["salary"] = result.value

    if "deadline" in changes:
        result = parse_deadline(changes["deadline"])
        if result.ok:
            updates["deadline"] = result.value
        else:
            errors["deadline"] = result.error

    if not locked:
        for field, parser in (("experience_level", parse_experience), ("position", parse_position)):
            if field in changes:
                result = parser(changes[field])
                if result.ok:
                    updates[field] = result.value
                else:
                    errors[field] = result.error

        if "company_id" in changes:
            if _company_exists(db, changes["company_id"]):
                updates["company_id"] = int(changes["company_id"])
            else:
                errors["company_id"] = "Company not found."

    _raise_if_errors(errors)

    for field, value in updates.items():
        setattr(job, field, value)
    db.commit()
    db.refresh(job)

    logger.info(
        f"Job updated: job_id={job.id}, employer_id={employer_id}, "
        f"fields={sorted(updates)}, locked={locked}"
    )
    return job
