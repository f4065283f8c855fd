"""
Job management routes.
"""

import logging

from fastapi import APIRouter, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse

from jobqueue.api.deps import JobQueueDep
from jobqueue.constants import API_V1_PREFIX, EXPORT_FILENAME, JobStatus
from jobqueue.exceptions import JobNotFoundError, JobNotRequeueableError, QueueFullError
from jobqueue.types.api import (
    CreateJobRequest,
    CreateJobResponse,
    ErrorResponse,
    JobListResponse,
    JobResponse,
    JobStatsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{API_V1_PREFIX}/jobs", tags=["Jobs"])


def _dispatch_rejected_response(error: QueueFullError) -> JSONResponse:
    """Build the 503 response for a rejected dispatch."""
    body = ErrorResponse(
        error=str(error),
        detail="Job recorded as pending but not dispatched; requeue it later",
        job_id=error.job.id,
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(),
    )


@router.post(
    "",
    response_model=CreateJobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a job",
    description="Submit a new job. Fails fast with 503 when the dispatch queue is full.",
    responses={503: {"model": ErrorResponse}},
)
async def create_job(request: CreateJobRequest, job_queue: JobQueueDep):
    """
    Submit a new job.

    Args:
        request: Job submission request.
        job_queue: The job queue.

    Returns:
        CreateJobResponse with the job id and initial status, or a 503
        error response if the dispatch queue rejected the job.
    """
    try:
        job = job_queue.submit(
            job_type=request.type,
            payload=request.payload,
            max_retries=request.max_retries,
        )
    except QueueFullError as e:
        return _dispatch_rejected_response(e)

    return CreateJobResponse(job_id=job.id, status=job.status)


@router.get(
    "",
    response_model=JobListResponse,
    summary="List jobs",
    description="List all jobs, optionally filtered by status.",
)
async def list_jobs(
    job_queue: JobQueueDep,
    status: JobStatus | None = Query(default=None),
) -> JobListResponse:
    """
    List jobs.

    Args:
        job_queue: The job queue.
        status: Optional status filter.

    Returns:
        JobListResponse with matching jobs, oldest first.
    """
    jobs = job_queue.list_by_status(status) if status else job_queue.list_jobs()
    jobs.sort(key=lambda job: job.created_at)

    return JobListResponse(
        jobs=[JobResponse.from_job(job) for job in jobs],
        total=len(jobs),
    )


@router.get(
    "/export",
    summary="Export jobs",
    description="Download all jobs as a JSON attachment.",
)
async def export_jobs(job_queue: JobQueueDep) -> JSONResponse:
    """Export all jobs as a downloadable JSON document."""
    jobs = [
        JobResponse.from_job(job).model_dump(mode="json")
        for job in job_queue.list_jobs()
    ]
    return JSONResponse(
        content=jobs,
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


@router.get(
    "/stats/summary",
    response_model=JobStatsResponse,
    summary="Get job statistics",
    description="Get job counts by status and dispatch queue occupancy.",
)
async def get_job_stats(job_queue: JobQueueDep) -> JobStatsResponse:
    """Get job statistics."""
    return JobStatsResponse(
        **job_queue.stats(),
        queue_depth=job_queue.queue_depth,
        queue_capacity=job_queue.dispatch.capacity,
    )


@router.get(
    "/{job_id}",
    response_model=JobResponse,
    summary="Get job details",
    description="Get detailed information about a specific job.",
)
async def get_job(job_id: str, job_queue: JobQueueDep) -> JobResponse:
    """
    Get job details by ID.

    Raises:
        HTTPException: If job not found.
    """
    job = job_queue.get(job_id)

    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found",
        )

    return JobResponse.from_job(job)


@router.delete(
    "/{job_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a job",
    description="Remove a job in any state.",
)
async def delete_job(job_id: str, job_queue: JobQueueDep) -> Response:
    """
    Delete a job.

    Raises:
        HTTPException: If job not found.
    """
    if not job_queue.delete(job_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found",
        )

    logger.info("Job deleted", extra={"job_id": job_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{job_id}/requeue",
    response_model=CreateJobResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Requeue an undispatched job",
    description="Offer a pending job that was rejected at submission to the queue again.",
    responses={503: {"model": ErrorResponse}},
)
async def requeue_job(job_id: str, job_queue: JobQueueDep):
    """
    Requeue a job whose dispatch was rejected.

    Raises:
        HTTPException: If job not found or not awaiting dispatch.
    """
    try:
        job = job_queue.requeue(job_id)
    except JobNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found",
        )
    except JobNotRequeueableError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except QueueFullError as e:
        return _dispatch_rejected_response(e)

    return CreateJobResponse(job_id=job.id, status=job.status, message="Job requeued")
