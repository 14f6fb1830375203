"""
Application status state machine.

Transitions are checked against a fixed table keyed by the current status.
Moving an interview into the same interview status is a reschedule, not a
no-op. Interview details are validated according to the target status, the
new status is committed with an optimistic version check, and only then is
the candidate notified.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from jobhunt.core.errors import (
    AuthorizationError,
    ConcurrentUpdateError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from jobhunt.core.validators import normalize_text, parse_deadline
from jobhunt.db.models.application import Application, ApplicationStatus, InterviewMode
from jobhunt.services.directory import (
    DEFAULT_COMPANY_NAME,
    DEFAULT_JOB_TITLE,
    get_applicant_contact,
    get_job_context,
    get_job_owner,
)
from jobhunt.services.notification_service import InterviewInfo, Notifier

logger = logging.getLogger(__name__)

Status = ApplicationStatus


class TransitionKind(str, enum.Enum):
    ADVANCE = "advance"
    RESCHEDULE = "reschedule"
    DENIED = "denied"


ALLOWED_TRANSITIONS: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    Status.PENDING: frozenset({Status.SHORTLISTED, Status.REJECTED}),
    Status.SHORTLISTED: frozenset({Status.INTERVIEW_SCHEDULED, Status.REJECTED}),
    Status.INTERVIEW_SCHEDULED: frozenset({
        Status.INTERVIEW_SCHEDULED,
        Status.INTERVIEW_RESCHEDULED,
        Status.INTERVIEW_COMPLETED,
        Status.SHORTLISTED,
        Status.REJECTED,
    }),
    Status.INTERVIEW_RESCHEDULED: frozenset({
        Status.INTERVIEW_RESCHEDULED,
        Status.INTERVIEW_COMPLETED,
        Status.REJECTED,
    }),
    Status.INTERVIEW_COMPLETED: frozenset({Status.HIRED, Status.REJECTED}),
    Status.REJECTED: frozenset(),
    Status.HIRED: frozenset(),
}

_unmapped = set(ApplicationStatus) - set(ALLOWED_TRANSITIONS)
if _unmapped:
    raise RuntimeError(f"Transition table has no entry for: {sorted(s.value for s in _unmapped)}")

# Statuses that carry interview details; same-state moves between them are reschedules
INTERVIEW_STATUSES = frozenset({Status.INTERVIEW_SCHEDULED, Status.INTERVIEW_RESCHEDULED})


def classify_transition(current: ApplicationStatus, target: ApplicationStatus) -> TransitionKind:
    """Decide whether ``current -> target`` advances, reschedules or is denied."""
    if current == target and current in INTERVIEW_STATUSES:
        return TransitionKind.RESCHEDULE
    if target in ALLOWED_TRANSITIONS[current]:
        return TransitionKind.ADVANCE
    return TransitionKind.DENIED


@dataclass
class TransitionRequest:
    """Raw status-update payload as received from the employer."""
    status: Optional[str]
    interview_date: Any = None
    interview_time: Optional[str] = None
    mode: Optional[str] = None
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class TransitionOutcome:
    application: Application
    previous_status: ApplicationStatus
    kind: TransitionKind
    notification: Optional[str] = None
    warning: Optional[str] = None


def validate_interview_details(request: TransitionRequest) -> InterviewInfo:
    """
    Check the interview fields required to schedule or reschedule.

    Date, time and mode are mandatory; onsite interviews need a location and
    online interviews a meeting link.

    Raises:
        ValidationError: first missing or malformed field
    """
    date = parse_deadline(request.interview_date, field="interviewDate")
    if not date.ok:
        raise ValidationError(date.error, fields=["interviewDate"])

    time = normalize_text(request.interview_time)
    if not time:
        raise ValidationError("interviewTime is required.", fields=["interviewTime"])

    mode = normalize_text(request.mode).lower()
    if mode not in (InterviewMode.ONLINE.value, InterviewMode.ONSITE.value):
        raise ValidationError("mode must be online or onsite.", fields=["mode"])

    location = normalize_text(request.location)
    meeting_link = normalize_text(request.meeting_link)

    if mode == InterviewMode.ONLINE.value and not meeting_link:
        raise ValidationError("meetingLink is required for online interviews.", fields=["meetingLink"])
    if mode == InterviewMode.ONSITE.value and not location:
        raise ValidationError("location is required for onsite interviews.", fields=["location"])

    return InterviewInfo(
        date=date.value,
        time=time,
        mode=mode,
        location=location,
        meeting_link=meeting_link,
        notes=normalize_text(request.notes),
    )


def stored_interview(application: Application) -> InterviewInfo:
    return InterviewInfo(
        date=application.interview_date,
        time=application.interview_time or "",
        mode=application.interview_mode.value if application.interview_mode else None,
        location=application.interview_location or "",
        meeting_link=application.interview_meeting_link or "",
        notes=application.interview_notes or "",
    )


def _write_interview(application: Application, interview: InterviewInfo) -> None:
    application.interview_date = interview.date
    application.interview_time = interview.time
    application.interview_mode = InterviewMode(interview.mode)
    application.interview_location = interview.location
    application.interview_meeting_link = interview.meeting_link
    application.interview_notes = interview.notes


def _clear_interview(application: Application) -> None:
    application.interview_date = None
    application.interview_time = ""
    application.interview_mode = None
    application.interview_location = ""
    application.interview_meeting_link = ""
    application.interview_notes = ""


def transition_application_status(
    db: Session,
    application_id: int,
    employer_id: int,
    request: TransitionRequest,
    notifier: Optional[Notifier] = None,
) -> TransitionOutcome:
    """
    Move an application to a new status on behalf of the job's employer.

    All checks run before anything is written. After the commit, at most one
    notification is sent; a failure there is logged and reported as a
    warning on the outcome, never rolled back.

    Raises:
        NotFoundError: unknown application, or its job is gone
        AuthorizationError: caller did not create the job
        ValidationError: status missing, or interview details invalid
        InvalidTransitionError: transition not in the table
        ConflictError: reschedule without any changed detail
        ConcurrentUpdateError: another request changed the application first
    """
    application = db.query(Application).filter(Application.id == application_id).first()
    if not application:
        raise NotFoundError("Application not found.")

    owner_id = get_job_owner(db, application.job_id) if application.job_id is not None else None
    if owner_id is None:
        raise NotFoundError("Job not found for this application.")

    if owner_id != employer_id:
        logger.warning(
            f"Status update refused: application_id={application_id}, employer_id={employer_id} is not the owner"
        )
        raise AuthorizationError("You are not authorized to update this application.")

    requested = normalize_text(request.status).lower()
    if not requested:
        raise ValidationError("status is required.", fields=["status"])

    current = application.status
    try:
        target = ApplicationStatus(requested)
    except ValueError:
        raise InvalidTransitionError(f"Invalid status transition from {current.value} to {requested}.")

    kind = classify_transition(current, target)
    if kind == TransitionKind.DENIED:
        raise InvalidTransitionError(f"Invalid status transition from {current.value} to {target.value}.")

    if target in INTERVIEW_STATUSES:
        interview = validate_interview_details(request)
        if target == Status.INTERVIEW_RESCHEDULED and interview == stored_interview(application):
            raise ConflictError("Please change at least one interview detail to reschedule.")
        _write_interview(application, interview)

    if current == Status.INTERVIEW_SCHEDULED and target == Status.SHORTLISTED:
        _clear_interview(application)

    application.status = target
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning(f"Concurrent status update lost: application_id={application_id}")
        raise ConcurrentUpdateError("This application was updated by another request. Please retry.")
    db.refresh(application)

    logger.info(
        f"Application status changed: application_id={application.id}, "
        f"{current.value} -> {target.value} ({kind.value}), employer_id={employer_id}"
    )

    outcome = TransitionOutcome(application=application, previous_status=current, kind=kind)
    if notifier is not None:
        _notify(db, application, outcome, notifier)
    return outcome


def _notify(db: Session, application: Application, outcome: TransitionOutcome, notifier: Notifier) -> None:
    status = application.status
    if status not in (Status.INTERVIEW_SCHEDULED, Status.INTERVIEW_RESCHEDULED, Status.REJECTED, Status.HIRED):
        return

    contact = get_applicant_contact(db, application.applicant_id)
    if not contact or not contact.email:
        logger.info(f"No applicant email, notification skipped: application_id={application.id}")
        return

    job = get_job_context(db, application.job_id)
    title = job.title if job else DEFAULT_JOB_TITLE
    company_name = job.company_name if job else DEFAULT_COMPANY_NAME
    recipient = (contact.email, contact.display_name, title, company_name)

    try:
        if status == Status.INTERVIEW_SCHEDULED:
            notifier.send_interview_scheduled(*recipient, interview=stored_interview(application))
        elif status == Status.INTERVIEW_RESCHEDULED:
            notifier.send_interview_rescheduled(*recipient, interview=stored_interview(application))
        elif status == Status.REJECTED:
            notifier.send_rejected(*recipient)
        else:
            notifier.send_hired(*recipient, salary=job.salary if job else None)
    except Exception as e:
        logger.warning(
            f"Notification failed after status change: application_id={application.id}, "
            f"status={status.value}: {e}",
            exc_info=True,
        )
        outcome.warning = "Status updated, but the notification email could not be sent."
        return

    outcome.notification = status.value
