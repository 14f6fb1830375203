"""
Application endpoints: apply, list, and move applicants through the pipeline.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jobhunt.core import config
from jobhunt.core.auth_dependency import get_current_user_id
from jobhunt.db.session import get_db
from jobhunt.schemas.application import (
    ApplicantListResponse,
    ApplicationEnvelope,
    AppliedJobListResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from jobhunt.services import application_service
from jobhunt.services.notification_service import Notifier, get_notifier
from jobhunt.services.transition_engine import TransitionRequest, transition_application_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/application", tags=["Applications"])


# ✅ APPLY
@router.post("/apply/{job_id}", status_code=201, response_model=ApplicationEnvelope)
def apply_job(
    job_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    application = application_service.apply_to_job(db, job_id, user_id)
    return {"message": "Job applied successfully.", "application": application}


# ✅ MY APPLICATIONS
@router.get("/get", response_model=AppliedJobListResponse)
def get_applied_jobs(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    applications = application_service.list_applied_jobs(
        db, user_id, purge_orphans=config.ORPHAN_CLEANUP_ENABLED
    )
    return {"applications": applications}


# ✅ APPLICANTS FOR A JOB (employer)
@router.get("/{job_id}/applicants", response_model=ApplicantListResponse)
def get_applicants(
    job_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    applications = application_service.list_applicants(db, job_id, user_id)
    return {"job_id": job_id, "applications": applications}


# ✅ STATUS UPDATE (employer)
@router.post("/status/{application_id}/update", response_model=StatusUpdateResponse)
def update_status(
    application_id: int,
    payload: StatusUpdateRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier)
):
    outcome = transition_application_status(
        db,
        application_id,
        user_id,
        TransitionRequest(
            status=payload.status,
            interview_date=payload.interview_date,
            interview_time=payload.interview_time,
            mode=payload.mode,
            location=payload.location,
            meeting_link=payload.meeting_link,
            notes=payload.notes,
        ),
        notifier=notifier,
    )
    return {
        "message": "Status updated successfully.",
        "application": outcome.application,
        "previous_status": outcome.previous_status,
        "notification": outcome.notification,
        "warning": outcome.warning,
    }
