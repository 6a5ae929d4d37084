"""Processing job endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import CurrentUser, get_current_user, get_job_manager
from app.schemas.job import JobResponse
from app.services.jobs import Job, JobManager

router = APIRouter(prefix="/api/jobs", tags=["Jobs"])


def _get_owned_job(jobs: JobManager, job_id: str, user: CurrentUser) -> Job:
    job = jobs.get(job_id)
    if not job or job.user_id != user.user_id:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.get("/{job_id}", response_model=JobResponse)
def get_job(
    job_id: str,
    user: CurrentUser = Depends(get_current_user),
    jobs: JobManager = Depends(get_job_manager),
) -> JobResponse:
    """Current state of a processing job."""
    return JobResponse.model_validate(_get_owned_job(jobs, job_id, user))


@router.post("/{job_id}/cancel", response_model=JobResponse)
def cancel_job(
    job_id: str,
    user: CurrentUser = Depends(get_current_user),
    jobs: JobManager = Depends(get_job_manager),
) -> JobResponse:
    """Ask a queued or running job to stop at its next checkpoint."""
    job = _get_owned_job(jobs, job_id, user)
    if job.finished:
        raise HTTPException(status_code=409, detail=f"Job already {job.state.value}")
    jobs.cancel(job_id)
    return JobResponse.model_validate(job)
