"""
Exception hierarchy for the job queue core.

Routine outcomes (a failed execution attempt, an exhausted retry budget,
a lookup miss) are reported through return values and job state, not
exceptions. The errors below cover admission failures and misuse.
"""

from typing import TYPE_CHECKING

from jobqueue.constants import QUEUE_CLOSED_MESSAGE, QUEUE_FULL_MESSAGE, JobStatus

if TYPE_CHECKING:
    from jobqueue.types.job import Job


class JobQueueError(Exception):
    """Base class for all job queue errors."""


class QueueFullError(JobQueueError):
    """
    The dispatch queue rejected a job because it is at capacity.

    The job itself is already recorded in the store and stays pending.
    """

    def __init__(self, job: "Job", message: str = QUEUE_FULL_MESSAGE):
        super().__init__(message)
        self.job = job


class QueueClosedError(QueueFullError):
    """The dispatch queue rejected a job because it no longer accepts work."""

    def __init__(self, job: "Job"):
        super().__init__(job, QUEUE_CLOSED_MESSAGE)


class DispatchQueueClosed(JobQueueError):
    """The dispatch queue is closed and has no more items to deliver."""


class DuplicateJobError(JobQueueError):
    """A job with the same id already exists in the store."""

    def __init__(self, job_id: str):
        super().__init__(f"Job {job_id} already exists")
        self.job_id = job_id


class JobNotFoundError(JobQueueError):
    """The referenced job does not exist."""

    def __init__(self, job_id: str):
        super().__init__(f"Job {job_id} not found")
        self.job_id = job_id


class InvalidTransitionError(JobQueueError):
    """A status change that the job lifecycle does not allow."""

    def __init__(self, job_id: str, current: JobStatus, target: JobStatus):
        super().__init__(f"Job {job_id} cannot move from {current} to {target}")
        self.job_id = job_id
        self.current = current
        self.target = target


class JobNotRequeueableError(JobQueueError):
    """The job is not waiting for dispatch, so it cannot be requeued."""

    def __init__(self, job_id: str, status: JobStatus):
        super().__init__(f"Job {job_id} is not awaiting dispatch (status: {status})")
        self.job_id = job_id
        self.status = status
