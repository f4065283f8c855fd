"""
Job-related type definitions for internal use.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from jobqueue.constants import (
    DEFAULT_MAX_RETRIES,
    RETRY_EXHAUSTED_MESSAGE,
    TERMINAL_STATUSES,
    VALID_TRANSITIONS,
    JobStatus,
)
from jobqueue.exceptions import InvalidTransitionError


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def generate_job_id() -> str:
    """Generate a fresh opaque job identifier."""
    return str(uuid4())


class Job(BaseModel):
    """
    A unit of work and its lifecycle state.

    The job store owns the canonical instance of every job. Anything handed
    out by the store is a copy, so mutating methods below are only ever
    called by the store while it holds its lock.
    """

    id: str = Field(default_factory=generate_job_id)
    type: str
    payload: str
    status: JobStatus = JobStatus.PENDING
    retry_count: int = Field(default=0, ge=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    error_message: str | None = None

    @property
    def is_terminal(self) -> bool:
        """Check if the job reached a final state."""
        return self.status in TERMINAL_STATUSES

    @property
    def retries_exhausted(self) -> bool:
        """Check if another failed attempt would exhaust the retry budget."""
        return self.retry_count >= self.max_retries

    def transition(
        self,
        status: JobStatus,
        error_message: str | None = None,
        clear_error: bool = False,
    ) -> None:
        """
        Move the job to a new status.

        Args:
            status: Target status.
            error_message: Overwrites the stored error when given.
            clear_error: Drop the stored error message.

        Raises:
            InvalidTransitionError: If the lifecycle forbids the change.
        """
        if status != self.status and status not in VALID_TRANSITIONS[self.status]:
            raise InvalidTransitionError(self.id, self.status, status)

        self.status = status
        self.updated_at = utcnow()
        if clear_error:
            self.error_message = None
        if error_message:
            self.error_message = error_message

    def register_failure(self, error: str) -> JobStatus:
        """
        Apply the retry protocol after a failed execution attempt.

        While budget remains the retry counter is incremented and the job
        goes back to pending; otherwise it fails permanently.

        Args:
            error: Error reported by the failed attempt.

        Returns:
            The resulting status (PENDING or FAILED).
        """
        if self.retries_exhausted:
            self.transition(
                JobStatus.FAILED,
                error_message=f"{RETRY_EXHAUSTED_MESSAGE}: {error}",
            )
        else:
            self.retry_count += 1
            self.transition(JobStatus.PENDING, error_message=error)
        return self.status


class JobResult(BaseModel):
    """
    Result of job execution.
    Returned by job handlers after processing.
    """

    success: bool
    output: dict[str, Any] | None = None
    error: str | None = None
    duration_ms: float | None = None


@dataclass
class JobContext:
    """
    Context passed to job handlers during execution.
    Contains job metadata the handler may need.
    """

    job_id: str
    job_type: str
    payload: str
    retry_count: int
    max_retries: int
    worker_id: str

    @property
    def attempt(self) -> int:
        """Current attempt number, starting at 1."""
        return self.retry_count + 1

    @property
    def is_last_attempt(self) -> bool:
        """Check if this is the last retry attempt."""
        return self.retry_count >= self.max_retries

    @property
    def remaining_retries(self) -> int:
        """Get remaining retries after this attempt."""
        return max(0, self.max_retries - self.retry_count)

    @classmethod
    def from_job(cls, job: Job, worker_id: str) -> "JobContext":
        """Build a handler context from a job snapshot."""
        return cls(
            job_id=job.id,
            job_type=job.type,
            payload=job.payload,
            retry_count=job.retry_count,
            max_retries=job.max_retries,
            worker_id=worker_id,
        )
