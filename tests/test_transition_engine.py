"""
Unit tests for the application status state machine.
"""
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from jobhunt.core.clock import utcnow
from jobhunt.core.errors import (
    AuthorizationError,
    ConcurrentUpdateError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    TransientError,
    ValidationError,
)
from jobhunt.db.base import Base
from jobhunt.db.models import Application, ApplicationStatus, Company, InterviewMode, Job, User, UserRole
from jobhunt.services.transition_engine import (
    ALLOWED_TRANSITIONS,
    TransitionKind,
    TransitionRequest,
    classify_transition,
    transition_application_status,
)

S = ApplicationStatus

ONLINE_INTERVIEW = dict(
    interview_date="2025-06-01",
    interview_time="10:00",
    mode="online",
    meeting_link="https://x",
)


def schedule(**overrides):
    values = dict(ONLINE_INTERVIEW, status="interview_scheduled")
    values.update(overrides)
    return TransitionRequest(**values)


@pytest.fixture
def shortlisted(job, applicant, make_application):
    return make_application(job, applicant, status=S.SHORTLISTED)


@pytest.fixture
def scheduled(job, applicant, make_application):
    return make_application(
        job,
        applicant,
        status=S.INTERVIEW_SCHEDULED,
        interview_date=datetime(2025, 6, 1),
        interview_time="10:00",
        interview_mode=InterviewMode.ONLINE,
        interview_meeting_link="https://x",
        interview_notes="",
    )


# ============================================
# Transition table
# ============================================

def test_every_status_has_a_table_entry():
    assert set(ALLOWED_TRANSITIONS) == set(ApplicationStatus)


def test_terminal_states_allow_nothing():
    for terminal in (S.REJECTED, S.HIRED):
        for target in ApplicationStatus:
            assert classify_transition(terminal, target) == TransitionKind.DENIED


def test_nothing_returns_to_pending():
    for current in ApplicationStatus:
        assert classify_transition(current, S.PENDING) == TransitionKind.DENIED


@pytest.mark.parametrize("status", [S.INTERVIEW_SCHEDULED, S.INTERVIEW_RESCHEDULED])
def test_same_state_interview_move_is_a_reschedule(status):
    assert classify_transition(status, status) == TransitionKind.RESCHEDULE


@pytest.mark.parametrize("status", [S.PENDING, S.SHORTLISTED, S.INTERVIEW_COMPLETED])
def test_other_same_state_moves_are_denied(status):
    assert classify_transition(status, status) == TransitionKind.DENIED


@pytest.mark.parametrize("current, target", [
    (S.PENDING, S.SHORTLISTED),
    (S.PENDING, S.REJECTED),
    (S.SHORTLISTED, S.INTERVIEW_SCHEDULED),
    (S.INTERVIEW_SCHEDULED, S.INTERVIEW_RESCHEDULED),
    (S.INTERVIEW_SCHEDULED, S.INTERVIEW_COMPLETED),
    (S.INTERVIEW_SCHEDULED, S.SHORTLISTED),
    (S.INTERVIEW_RESCHEDULED, S.INTERVIEW_COMPLETED),
    (S.INTERVIEW_COMPLETED, S.HIRED),
    (S.INTERVIEW_COMPLETED, S.REJECTED),
])
def test_table_edges_advance(current, target):
    assert classify_transition(current, target) == TransitionKind.ADVANCE


@pytest.mark.parametrize("current, target", [
    (S.PENDING, S.HIRED),
    (S.PENDING, S.INTERVIEW_SCHEDULED),
    (S.SHORTLISTED, S.HIRED),
    (S.INTERVIEW_RESCHEDULED, S.INTERVIEW_SCHEDULED),
    (S.INTERVIEW_RESCHEDULED, S.SHORTLISTED),
    (S.INTERVIEW_COMPLETED, S.INTERVIEW_SCHEDULED),
])
def test_edges_outside_the_table_are_denied(current, target):
    assert classify_transition(current, target) == TransitionKind.DENIED


# ============================================
# Authorization and request checks
# ============================================

def test_unknown_application(db, employer):
    with pytest.raises(NotFoundError):
        transition_application_status(db, 999, employer.id, TransitionRequest(status="shortlisted"))


def test_application_whose_job_is_gone(db, job, applicant, employer, make_application):
    application = make_application(job, applicant)
    application.job_id = None
    db.commit()

    with pytest.raises(NotFoundError) as exc:
        transition_application_status(db, application.id, employer.id, TransitionRequest(status="shortlisted"))
    assert exc.value.message == "Job not found for this application."


def test_only_the_job_owner_can_transition(db, shortlisted, make_user):
    intruder = make_user(role=UserRole.EMPLOYER, resume=False)

    with pytest.raises(AuthorizationError):
        transition_application_status(db, shortlisted.id, intruder.id, TransitionRequest(status="rejected"))

    db.refresh(shortlisted)
    assert shortlisted.status == S.SHORTLISTED


def test_status_is_required(db, shortlisted, employer):
    with pytest.raises(ValidationError) as exc:
        transition_application_status(db, shortlisted.id, employer.id, TransitionRequest(status="  "))
    assert exc.value.fields == ["status"]


def test_status_is_compared_lower_cased(db, shortlisted, employer):
    outcome = transition_application_status(db, shortlisted.id, employer.id, TransitionRequest(status="REJECTED"))
    assert outcome.application.status == S.REJECTED


def test_invalid_transition_names_both_states(db, job, applicant, employer, make_application):
    application = make_application(job, applicant)

    with pytest.raises(InvalidTransitionError) as exc:
        transition_application_status(db, application.id, employer.id, TransitionRequest(status="hired"))

    assert "pending" in exc.value.message and "hired" in exc.value.message
    assert exc.value.status_code == 409


def test_unknown_status_is_an_invalid_transition(db, shortlisted, employer):
    with pytest.raises(InvalidTransitionError) as exc:
        transition_application_status(db, shortlisted.id, employer.id, TransitionRequest(status="ghosted"))
    assert "shortlisted" in exc.value.message and "ghosted" in exc.value.message


# ============================================
# Interview details
# ============================================

def test_schedule_interview_stores_details_and_notifies(db, shortlisted, employer, applicant, notifier):
    outcome = transition_application_status(
        db, shortlisted.id, employer.id, schedule(), notifier=notifier
    )

    application = outcome.application
    assert application.status == S.INTERVIEW_SCHEDULED
    assert application.interview_date == datetime(2025, 6, 1)
    assert application.interview_time == "10:00"
    assert application.interview_mode == InterviewMode.ONLINE
    assert application.interview_meeting_link == "https://x"
    assert application.interview_location == ""
    assert application.interview_notes == ""

    assert outcome.previous_status == S.SHORTLISTED
    assert outcome.kind == TransitionKind.ADVANCE
    assert outcome.notification == "interview_scheduled"
    assert outcome.warning is None

    assert len(notifier.sent) == 1
    kind, payload = notifier.sent[0]
    assert kind == "interview_scheduled"
    assert payload["to"] == applicant.email
    assert payload["applicant_name"] == "Asha Rao"
    assert payload["job_title"] == "Backend Engineer"
    assert payload["company_name"] == "Acme Labs"
    assert payload["interview"].meeting_link == "https://x"


@pytest.mark.parametrize("overrides, field, message", [
    ({"interview_date": None}, "interviewDate", "interviewDate is required."),
    ({"interview_date": "someday"}, "interviewDate", "interviewDate must be a valid date."),
    ({"interview_time": "  "}, "interviewTime", "interviewTime is required."),
    ({"mode": "carrier pigeon"}, "mode", "mode must be online or onsite."),
    ({"meeting_link": ""}, "meetingLink", "meetingLink is required for online interviews."),
    ({"mode": "onsite", "location": ""}, "location", "location is required for onsite interviews."),
])
def test_interview_details_are_validated(db, shortlisted, employer, notifier, overrides, field, message):
    with pytest.raises(ValidationError) as exc:
        transition_application_status(db, shortlisted.id, employer.id, schedule(**overrides), notifier=notifier)

    assert exc.value.fields == [field]
    assert exc.value.message == message
    db.refresh(shortlisted)
    assert shortlisted.status == S.SHORTLISTED
    assert notifier.sent == []


def test_onsite_interview_needs_location_only(db, shortlisted, employer):
    outcome = transition_application_status(
        db, shortlisted.id, employer.id,
        schedule(mode="ONSITE", meeting_link="", location=" Acme HQ, Floor 3 ", notes="  Bring ID  "),
    )
    assert outcome.application.interview_mode == InterviewMode.ONSITE
    assert outcome.application.interview_location == "Acme HQ, Floor 3"
    assert outcome.application.interview_notes == "Bring ID"


def test_reschedule_with_identical_details_is_rejected(db, scheduled, employer, notifier):
    version = scheduled.version

    with pytest.raises(ConflictError) as exc:
        transition_application_status(
            db, scheduled.id, employer.id, schedule(status="interview_rescheduled"), notifier=notifier
        )

    assert exc.value.message == "Please change at least one interview detail to reschedule."
    db.refresh(scheduled)
    assert scheduled.status == S.INTERVIEW_SCHEDULED
    assert scheduled.version == version
    assert notifier.sent == []


def test_reschedule_with_a_changed_field_is_accepted(db, scheduled, employer, notifier):
    outcome = transition_application_status(
        db, scheduled.id, employer.id,
        schedule(status="interview_rescheduled", interview_time="14:30"),
        notifier=notifier,
    )

    assert outcome.application.status == S.INTERVIEW_RESCHEDULED
    assert outcome.application.interview_time == "14:30"
    assert [kind for kind, _ in notifier.sent] == ["interview_rescheduled"]


def test_same_state_schedule_overwrites_details(db, scheduled, employer, notifier):
    outcome = transition_application_status(
        db, scheduled.id, employer.id,
        schedule(mode="onsite", meeting_link="", location="Acme HQ"),
        notifier=notifier,
    )

    application = outcome.application
    assert outcome.kind == TransitionKind.RESCHEDULE
    assert application.status == S.INTERVIEW_SCHEDULED
    assert application.interview_mode == InterviewMode.ONSITE
    assert application.interview_location == "Acme HQ"
    assert application.interview_meeting_link == ""
    assert [kind for kind, _ in notifier.sent] == ["interview_scheduled"]


def test_back_to_shortlisted_clears_interview(db, scheduled, employer, notifier):
    outcome = transition_application_status(
        db, scheduled.id, employer.id, TransitionRequest(status="shortlisted"), notifier=notifier
    )

    assert outcome.application.status == S.SHORTLISTED
    assert outcome.application.interview == {
        "date": None,
        "time": "",
        "mode": None,
        "location": "",
        "meeting_link": "",
        "notes": "",
    }
    assert outcome.notification is None
    assert notifier.sent == []


# ============================================
# Full walk and notifications
# ============================================

def test_full_pipeline_walk_to_hired(db, job, applicant, employer, make_application, notifier):
    application = make_application(job, applicant)
    steps = [
        TransitionRequest(status="shortlisted"),
        schedule(),
        schedule(status="interview_rescheduled", interview_date="2025-06-03"),
        schedule(status="interview_rescheduled", interview_date="2025-06-04", notes="Moved again"),
        TransitionRequest(status="interview_completed"),
        TransitionRequest(status="hired"),
    ]

    for request in steps:
        transition_application_status(db, application.id, employer.id, request, notifier=notifier)

    db.refresh(application)
    assert application.status == S.HIRED
    assert [kind for kind, _ in notifier.sent] == [
        "interview_scheduled",
        "interview_rescheduled",
        "interview_rescheduled",
        "hired",
    ]
    assert notifier.sent[-1][1]["salary"] == 10.0


def test_rejection_notifies(db, shortlisted, employer, notifier):
    outcome = transition_application_status(
        db, shortlisted.id, employer.id, TransitionRequest(status="rejected"), notifier=notifier
    )
    assert outcome.notification == "rejected"
    assert notifier.sent[0][0] == "rejected"


def test_no_notification_without_applicant_email(db, job, employer, make_user, make_application, notifier):
    silent = make_user(email="")
    application = make_application(job, silent, status=S.SHORTLISTED)

    outcome = transition_application_status(
        db, application.id, employer.id, TransitionRequest(status="rejected"), notifier=notifier
    )

    assert outcome.application.status == S.REJECTED
    assert outcome.notification is None
    assert notifier.sent == []


def test_notification_failure_keeps_status_and_warns(db, shortlisted, employer, notifier):
    notifier.fail_with = TransientError("Email delivery failed: timed out")

    outcome = transition_application_status(
        db, shortlisted.id, employer.id, TransitionRequest(status="rejected"), notifier=notifier
    )

    assert outcome.notification is None
    assert outcome.warning is not None
    db.refresh(shortlisted)
    assert shortlisted.status == S.REJECTED


def test_notification_uses_defaults_when_job_is_gone(db, job, applicant, employer, make_application,
                                                     notifier, monkeypatch):
    from jobhunt.services import transition_engine

    application = make_application(job, applicant, status=S.INTERVIEW_COMPLETED)
    monkeypatch.setattr(transition_engine, "get_job_context", lambda db, job_id: None)

    outcome = transition_application_status(
        db, application.id, employer.id, TransitionRequest(status="hired"), notifier=notifier
    )

    assert outcome.application.status == S.HIRED
    assert outcome.notification == "hired"
    kind, payload = notifier.sent[0]
    assert kind == "hired"
    assert payload["job_title"] == "this role"
    assert payload["company_name"] == "our company"
    assert payload["salary"] is None


def test_version_increments_on_each_transition(db, shortlisted, employer):
    start = shortlisted.version
    transition_application_status(db, shortlisted.id, employer.id, schedule())
    transition_application_status(db, shortlisted.id, employer.id, TransitionRequest(status="interview_completed"))

    db.refresh(shortlisted)
    assert shortlisted.version == start + 2


# ============================================
# Optimistic concurrency
# ============================================

def test_concurrent_transition_loser_gets_retryable_conflict(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    setup = Session()
    employer = User(fullname="Boss", email="boss@example.com", password_hash="x", role=UserRole.EMPLOYER)
    candidate = User(fullname="Cand", email="cand@example.com", password_hash="x", resume_url="http://cv")
    setup.add_all([employer, candidate])
    setup.commit()
    company = Company(name="Race Co", user_id=employer.id)
    setup.add(company)
    setup.commit()
    job = Job(
        created_by=employer.id, company_id=company.id, title="Racer", description="d",
        requirements=["a", "b"], core_requirements=[], location="x", location_type="remote",
        job_type="full-time", experience_level=0, position=1, salary=5.0, deadline=utcnow(),
    )
    setup.add(job)
    setup.commit()
    application = Application(job_id=job.id, applicant_id=candidate.id, status=S.SHORTLISTED)
    setup.add(application)
    setup.commit()
    application_id, employer_id = application.id, employer.id
    setup.close()

    first, second = Session(), Session()
    try:
        # Both requests read the application before either commits; the
        # identity map is weak, so keep the rows referenced
        held_first = first.get(Application, application_id)
        held_second = second.get(Application, application_id)
        assert held_first.status == held_second.status == S.SHORTLISTED

        transition_application_status(first, application_id, employer_id, TransitionRequest(status="rejected"))

        with pytest.raises(ConcurrentUpdateError) as exc:
            transition_application_status(second, application_id, employer_id, schedule())
        assert exc.value.retryable is True
    finally:
        first.close()
        second.close()

    check = Session()
    try:
        stored = check.get(Application, application_id)
        assert stored.status == S.REJECTED
        assert stored.interview_date is None
    finally:
        check.close()
        engine.dispose()
