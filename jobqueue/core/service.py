"""
Job queue service.

Ties the job store, the event log and the dispatch queue together and
implements the admission policy and the retry protocol. This is the public
surface consumed by the HTTP API and by the worker pool.
"""

import logging
import threading

from jobqueue.config import Settings, get_settings
from jobqueue.constants import (
    QUEUE_CLOSED_MESSAGE,
    QUEUE_FULL_MESSAGE,
    RETRY_DISPATCH_REJECTED_MESSAGE,
    JobStatus,
)
from jobqueue.core.dispatch import DispatchQueue
from jobqueue.core.event_log import EventLog, console_sink
from jobqueue.core.store import JobStore
from jobqueue.exceptions import (
    JobNotFoundError,
    JobNotRequeueableError,
    QueueClosedError,
    QueueFullError,
)
from jobqueue.observability.metrics import MetricsCollector, get_metrics
from jobqueue.types.job import Job

logger = logging.getLogger(__name__)


class JobQueue:
    """
    In-process job queue.

    Submission records the job in the store first and only then offers its
    id to the dispatch queue, so a rejected job is never lost: it stays
    pending and can be requeued once capacity frees up.
    """

    def __init__(
        self,
        capacity: int,
        default_max_retries: int = 3,
        store: JobStore | None = None,
        event_log: EventLog | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize the job queue.

        Args:
            capacity: Dispatch queue capacity.
            default_max_retries: Retry budget for jobs that do not set one.
            store: Job store. A fresh one is created if not provided.
            event_log: Event log. A silent one is created if not provided.
            metrics: Metrics collector. Uses the global one if not provided.
        """
        self.default_max_retries = default_max_retries
        self.store = store if store is not None else JobStore()
        self.event_log = event_log if event_log is not None else EventLog()
        self.dispatch = DispatchQueue(capacity)
        self._metrics = metrics or get_metrics()

        # Pending jobs whose dispatch was rejected at admission
        self._undispatched: set[str] = set()
        self._undispatched_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "JobQueue":
        """Build a job queue from application settings."""
        settings = settings or get_settings()
        sinks = [console_sink] if settings.event_log_echo else []
        return cls(
            capacity=settings.queue_capacity,
            default_max_retries=settings.default_max_retries,
            event_log=EventLog(sinks=sinks, max_entries=settings.event_log_max_entries),
        )

    # ------------------------------------------------------------------
    # Producer / reader operations
    # ------------------------------------------------------------------

    def submit(
        self,
        job_type: str,
        payload: str,
        max_retries: int | None = None,
    ) -> Job:
        """
        Create a job and offer it to the dispatch queue.

        Args:
            job_type: Execution behaviour discriminator.
            payload: Opaque job payload.
            max_retries: Retry budget. Defaults to the queue default.

        Returns:
            Snapshot of the created job (status PENDING).

        Raises:
            QueueFullError: If the dispatch queue is at capacity. The job
                remains in the store as PENDING.
            QueueClosedError: If the dispatch queue is closed. The job
                remains in the store as PENDING.
        """
        job = self.store.insert(
            Job(
                type=job_type,
                payload=payload,
                max_retries=(
                    self.default_max_retries if max_retries is None else max_retries
                ),
            )
        )
        self.event_log.append(f"[ENQUEUE] Job {job.id} ({job.type}) added to queue")
        self._metrics.record_job_submitted(job.type)

        self._dispatch_or_raise(job)
        return job

    def requeue(self, job_id: str) -> Job:
        """
        Offer a job whose admission was rejected to the dispatch queue again.

        Args:
            job_id: The job id.

        Returns:
            Snapshot of the job.

        Raises:
            JobNotFoundError: If the job does not exist.
            JobNotRequeueableError: If the job is not awaiting dispatch.
            QueueFullError: If the dispatch queue is still at capacity.
            QueueClosedError: If the dispatch queue is closed.
        """
        job = self.store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)

        with self._undispatched_lock:
            awaiting = job_id in self._undispatched
        if not awaiting or job.status != JobStatus.PENDING:
            raise JobNotRequeueableError(job_id, job.status)

        self.event_log.append(f"[REQUEUE] Job {job.id} ({job.type}) offered to queue again")
        self._dispatch_or_raise(job)
        return job

    def get(self, job_id: str) -> Job | None:
        """Get a job snapshot, or None if not found."""
        return self.store.get(job_id)

    def list_jobs(self) -> list[Job]:
        """Get snapshots of all jobs."""
        return self.store.list_jobs()

    def list_by_status(self, status: JobStatus) -> list[Job]:
        """Get snapshots of all jobs in a status."""
        return self.store.list_by_status(status)

    def delete(self, job_id: str) -> bool:
        """
        Delete a job in any state.

        A deleted job that is still in the dispatch queue is skipped by the
        worker that dequeues it.

        Returns:
            True if the job existed and was removed.
        """
        deleted = self.store.delete(job_id)
        if deleted:
            with self._undispatched_lock:
                self._undispatched.discard(job_id)
            self.event_log.append(f"[DELETE] Job {job_id} deleted")
        return deleted

    def logs(self) -> list[str]:
        """Get the event log as rendered lines."""
        return self.event_log.lines()

    def stats(self) -> dict[str, int]:
        """Get job counts per status and the total."""
        counts = self.store.count_by_status()
        stats = {str(status): count for status, count in counts.items()}
        stats["total"] = sum(counts.values())
        return stats

    @property
    def queue_depth(self) -> int:
        """Number of job ids waiting for a worker."""
        return self.dispatch.qsize()

    # ------------------------------------------------------------------
    # Worker operations
    # ------------------------------------------------------------------

    async def next_job_id(self) -> str:
        """
        Wait for the next dispatched job id.

        Raises:
            DispatchQueueClosed: Once the queue is closed and drained.
        """
        job_id = await self.dispatch.get()
        self._metrics.update_queue_depth(self.dispatch.qsize())
        return job_id

    def start_job(self, job_id: str) -> Job | None:
        """
        Transition a dequeued job to PROCESSING.

        Returns:
            Snapshot of the job, or None if it was deleted meanwhile.
        """
        job = self.store.update_status(job_id, JobStatus.PROCESSING)
        if job is not None:
            self.event_log.append(f"[UPDATE] Job {job_id} status: {job.status}")
        return job

    def complete_job(self, job_id: str) -> Job | None:
        """
        Transition a job to DONE, clearing any error left by earlier attempts.

        Returns:
            Snapshot of the job, or None if it was deleted meanwhile.
        """
        job = self.store.update_status(job_id, JobStatus.DONE, clear_error=True)
        if job is not None:
            self.event_log.append(f"[UPDATE] Job {job_id} status: {job.status}")
        return job

    def fail_job(self, job_id: str, error: str) -> Job | None:
        """
        Record a failed attempt and apply the retry protocol.

        While retry budget remains the job goes back to PENDING and its id is
        re-submitted. If a full dispatch queue rejects the re-submission the job
        is failed immediately; if the queue is closed the job stays PENDING
        and can be requeued. Once the budget is exhausted the job fails.

        Args:
            job_id: The job id.
            error: Error reported by the attempt.

        Returns:
            Snapshot of the job after the transition, or None if it was
            deleted meanwhile.
        """
        job = self.store.record_failure(job_id, error)
        if job is None:
            return None

        if job.status == JobStatus.FAILED:
            self.event_log.append(
                f"[RETRY] Job {job_id} failed after {job.max_retries} retries"
            )
            self.event_log.append(
                f"[UPDATE] Job {job_id} status: {job.status} (error: {job.error_message})"
            )
            return job

        self.event_log.append(
            f"[RETRY] Job {job_id} retry #{job.retry_count} (error: {error})"
        )
        self._metrics.record_job_retried(job.type)

        if self.dispatch.submit(job_id):
            self._metrics.update_queue_depth(self.dispatch.qsize())
            return job

        if self.dispatch.closed:
            # Stays pending alongside the ids left in the closed queue
            with self._undispatched_lock:
                self._undispatched.add(job_id)
            self._metrics.record_job_rejected("retry_closed")
            self.event_log.append(
                f"[REJECT] Job {job_id} ({job.type}) not dispatched: {QUEUE_CLOSED_MESSAGE}"
            )
            logger.info(
                "Retry not dispatched, queue closed",
                extra={"job_id": job_id, "retry_count": job.retry_count},
            )
            return job

        self._metrics.record_job_rejected("retry_queue_full")
        failed = self.store.update_status(
            job_id,
            JobStatus.FAILED,
            error_message=RETRY_DISPATCH_REJECTED_MESSAGE,
        )
        self.event_log.append(
            f"[UPDATE] Job {job_id} status: {JobStatus.FAILED} "
            f"(error: {RETRY_DISPATCH_REJECTED_MESSAGE})"
        )
        logger.warning(
            "Retry dispatch rejected",
            extra={"job_id": job_id, "retry_count": job.retry_count},
        )
        return failed

    def close(self) -> None:
        """Stop accepting dispatches. Queued ids are still delivered."""
        if self.dispatch.closed:
            return
        self.dispatch.close()
        self.event_log.append("[SYSTEM] Queue closed")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _dispatch_or_raise(self, job: Job) -> None:
        """Offer a stored job to the dispatch queue."""
        if self.dispatch.submit(job.id):
            with self._undispatched_lock:
                self._undispatched.discard(job.id)
            self._metrics.update_queue_depth(self.dispatch.qsize())
            return

        with self._undispatched_lock:
            self._undispatched.add(job.id)

        if self.dispatch.closed:
            self._metrics.record_job_rejected("closed")
            self.event_log.append(
                f"[REJECT] Job {job.id} ({job.type}) not dispatched: {QUEUE_CLOSED_MESSAGE}"
            )
            logger.warning("Dispatch queue closed", extra={"job_id": job.id})
            raise QueueClosedError(job)

        self._metrics.record_job_rejected("queue_full")
        self.event_log.append(
            f"[REJECT] Job {job.id} ({job.type}) not dispatched: {QUEUE_FULL_MESSAGE}"
        )
        logger.warning(
            "Dispatch queue full",
            extra={"job_id": job.id, "capacity": self.dispatch.capacity},
        )
        raise QueueFullError(job)
