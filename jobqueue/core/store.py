"""
In-memory job store.

The store is the single owner of every job record. All reads return copies
and all mutations go through the methods below, each under one exclusive lock.
"""

import threading
from collections import Counter

from jobqueue.constants import JobStatus
from jobqueue.exceptions import DuplicateJobError
from jobqueue.types.job import Job


class JobStore:
    """
    Concurrency-safe map from job id to job record.

    Nothing here awaits or calls out while the lock is held. Safe to call
    from the event loop and from plain threads.
    """

    def __init__(self):
        self._jobs: dict[str, Job] = {}
        self._lock = threading.Lock()

    def insert(self, job: Job) -> Job:
        """
        Add a new job.

        Args:
            job: The job to store. The store keeps its own copy.

        Returns:
            A snapshot of the stored job.

        Raises:
            DuplicateJobError: If a job with the same id exists.
        """
        with self._lock:
            if job.id in self._jobs:
                raise DuplicateJobError(job.id)
            stored = job.model_copy()
            self._jobs[stored.id] = stored
            return stored.model_copy()

    def get(self, job_id: str) -> Job | None:
        """Get a snapshot of a job, or None if absent."""
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy() if job is not None else None

    def list_jobs(self) -> list[Job]:
        """Get snapshots of all jobs. Order is not guaranteed."""
        with self._lock:
            return [job.model_copy() for job in self._jobs.values()]

    def list_by_status(self, status: JobStatus) -> list[Job]:
        """Get snapshots of all jobs in the given status."""
        with self._lock:
            return [
                job.model_copy()
                for job in self._jobs.values()
                if job.status == status
            ]

    def update_status(
        self,
        job_id: str,
        status: JobStatus,
        error_message: str | None = None,
        *,
        clear_error: bool = False,
    ) -> Job | None:
        """
        Change a job's status.

        Args:
            job_id: The job id.
            status: Target status.
            error_message: Overwrites the stored error when given.
            clear_error: Drop the stored error message.

        Returns:
            Snapshot of the updated job, or None if the job does not exist.

        Raises:
            InvalidTransitionError: If the lifecycle forbids the change.
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            job.transition(status, error_message=error_message, clear_error=clear_error)
            return job.model_copy()

    def record_failure(self, job_id: str, error: str) -> Job | None:
        """
        Apply the retry protocol to a failed attempt in one critical section.

        Args:
            job_id: The job id.
            error: Error reported by the attempt.

        Returns:
            Snapshot of the job (PENDING with an incremented retry count, or
            FAILED), or None if the job does not exist.
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            job.register_failure(error)
            return job.model_copy()

    def delete(self, job_id: str) -> bool:
        """Remove a job. Returns whether anything was removed."""
        with self._lock:
            return self._jobs.pop(job_id, None) is not None

    def count_by_status(self) -> dict[JobStatus, int]:
        """Count jobs per status. Every status is present in the result."""
        with self._lock:
            counts = Counter(job.status for job in self._jobs.values())
        return {status: counts.get(status, 0) for status in JobStatus}

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        with self._lock:
            return job_id in self._jobs
