"""
API request and response type definitions.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from jobqueue.constants import JobStatus
from jobqueue.types.job import Job


class CreateJobRequest(BaseModel):
    """Request body for submitting a new job."""

    type: str = Field(..., min_length=1, description="Job type, selects execution behaviour")
    payload: str = Field(..., min_length=1, description="Opaque job payload")
    max_retries: int | None = Field(
        default=None, ge=0, le=10, description="Maximum retry attempts"
    )


class CreateJobResponse(BaseModel):
    """Response body after submitting a job."""

    job_id: str
    status: JobStatus
    message: str = "Job added to queue"


class JobResponse(BaseModel):
    """Full job details response."""

    id: str
    type: str
    payload: str
    status: JobStatus
    retry_count: int
    max_retries: int
    created_at: datetime
    updated_at: datetime
    error_message: str | None

    @classmethod
    def from_job(cls, job: Job) -> "JobResponse":
        """Build a response from a job snapshot."""
        return cls.model_validate(job.model_dump())


class JobListResponse(BaseModel):
    """List of jobs."""

    jobs: list[JobResponse]
    total: int


class JobStatsResponse(BaseModel):
    """Job counts per status plus dispatch queue occupancy."""

    total: int
    pending: int
    processing: int
    done: int
    failed: int
    queue_depth: int
    queue_capacity: int


class LogsResponse(BaseModel):
    """Event log lines in append order."""

    logs: list[str]
    total: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    workers: int
    busy_workers: int
    queue_closed: bool
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    detail: str | None = None
    job_id: str | None = None
