"""
Job endpoints.

Thin wiring over the job lifecycle engine; every rule lives in
jobhunt.services.job_lifecycle.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from jobhunt.core.auth_dependency import get_current_user_id
from jobhunt.db.session import get_db
from jobhunt.schemas.job import JobCreate, JobEnvelope, JobListResponse, JobResponse, JobUpdate
from jobhunt.services import job_lifecycle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/job", tags=["Jobs"])


# ✅ POST A JOB (employer)
@router.post("/post", status_code=201, response_model=JobEnvelope)
def post_job(
    payload: JobCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    job = job_lifecycle.create_job(db, user_id, payload.model_dump())
    return {"message": "New job created successfully.", "job": job}


# ✅ SEARCH JOBS
@router.get("/get", response_model=JobListResponse)
def get_all_jobs(
    keyword: Optional[str] = Query(None, description="Search in title, description, location and type"),
    include_archived: bool = Query(False, description="Include archived and expired jobs"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    jobs, total = job_lifecycle.list_jobs(
        db,
        keyword=keyword,
        include_archived=include_archived,
        page=page,
        page_size=page_size,
    )
    return {"jobs": jobs, "total": total, "page": page, "page_size": page_size}


# ✅ FETCH ONE JOB (410 once archived)
@router.get("/get/{job_id}", response_model=JobResponse)
def get_job_by_id(
    job_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return job_lifecycle.get_job(db, job_id)


# ✅ EMPLOYER'S OWN JOBS
@router.get("/getadminjobs", response_model=JobListResponse)
def get_admin_jobs(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    jobs = job_lifecycle.get_employer_jobs(db, user_id)
    return {"jobs": jobs, "total": len(jobs), "page": 1, "page_size": max(len(jobs), 1)}


# ✅ EDIT A JOB
@router.put("/update/{job_id}", response_model=JobEnvelope)
def update_job(
    job_id: int,
    payload: JobUpdate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    job = job_lifecycle.update_job(db, job_id, user_id, payload.model_dump(exclude_unset=True))
    return {"message": "Job updated successfully.", "job": job}
