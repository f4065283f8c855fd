"""
Worker pool for executing jobs.

A fixed number of worker loops drain the dispatch queue, execute jobs and
apply the retry protocol. Shutdown is cooperative: the stop signal is only
observed between jobs, so in-flight executions always run to completion.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from jobqueue.config import get_settings
from jobqueue.constants import SPAN_EXECUTE_JOB, JobStatus
from jobqueue.core.service import JobQueue
from jobqueue.exceptions import DispatchQueueClosed
from jobqueue.observability.logging import bind_context
from jobqueue.observability.metrics import MetricsCollector, get_metrics
from jobqueue.observability.tracing import get_tracer
from jobqueue.types.job import JobContext, JobResult
from jobqueue.worker.handlers import execute_job

logger = logging.getLogger(__name__)

# Executes one attempt of a job; substitutable for tests
JobExecutor = Callable[[JobContext], Awaitable[JobResult]]


class WorkerPool:
    """
    Fixed-size pool of cooperative worker loops.

    Features:
    - Blocking wait on the dispatch queue raced against the shutdown signal
    - Retry and permanent failure handling via the job queue
    - Graceful stop that waits for every loop to finish its current job
    - Termination when the dispatch queue is closed and drained
    """

    def __init__(
        self,
        job_queue: JobQueue,
        worker_count: int | None = None,
        executor: JobExecutor | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize the worker pool.

        Args:
            job_queue: The job queue to drain.
            worker_count: Number of worker loops. Defaults to the setting.
            executor: Runs one job attempt. Defaults to the handler registry.
            metrics: Metrics collector. Uses the global one if not provided.
        """
        self.job_queue = job_queue
        if worker_count is None:
            worker_count = get_settings().worker_count
        self.worker_count = worker_count
        if self.worker_count < 1:
            raise ValueError("worker_count must be at least 1")
        self.executor = executor or execute_job

        self._metrics = metrics or get_metrics()
        self._shutdown = asyncio.Event()
        self._workers: list[asyncio.Task] = []
        self._busy: set[str] = set()

    @property
    def running(self) -> bool:
        """Whether any worker loop is still alive."""
        return any(not task.done() for task in self._workers)

    @property
    def busy_workers(self) -> int:
        """Number of workers currently executing a job."""
        return len(self._busy)

    def start(self) -> None:
        """
        Start all worker loops.

        Must be called from within a running event loop.

        Raises:
            RuntimeError: If the pool was already started.
        """
        if self._workers:
            raise RuntimeError("Worker pool already started")

        logger.info("Worker pool starting", extra={"worker_count": self.worker_count})

        for index in range(1, self.worker_count + 1):
            worker_id = f"worker-{index}"
            task = asyncio.create_task(self._worker_loop(worker_id), name=worker_id)
            self._workers.append(task)

    async def stop(self) -> None:
        """
        Signal shutdown and wait for every worker loop to exit.

        Jobs already dequeued finish executing before this returns. Jobs
        still waiting in the dispatch queue stay PENDING.
        """
        if not self._shutdown.is_set():
            logger.info("Worker pool stopping", extra={"busy_workers": self.busy_workers})
            self._shutdown.set()

        if self._workers:
            await asyncio.gather(*self._workers, return_exceptions=True)

        logger.info("Worker pool stopped")

    async def __aenter__(self) -> "WorkerPool":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def _worker_loop(self, worker_id: str) -> None:
        """Pull job ids until shutdown or until the queue is closed."""
        bind_context(worker_id=worker_id)
        logger.info("Worker ready", extra={"worker_id": worker_id})

        while not self._shutdown.is_set():
            try:
                job_id = await self._next_job_id()
            except DispatchQueueClosed:
                logger.info("Worker exiting: queue closed", extra={"worker_id": worker_id})
                return

            if job_id is None:
                break

            try:
                await self._process_job(worker_id, job_id)
            except Exception as e:
                logger.exception(
                    f"Error in worker loop: {e}",
                    extra={"worker_id": worker_id, "job_id": job_id}
                )

        logger.info("Worker exiting: shutdown", extra={"worker_id": worker_id})

    async def _next_job_id(self) -> str | None:
        """
        Wait for a job id or the shutdown signal, whichever comes first.

        A delivered id is always returned, even when shutdown fired at the
        same time, so no dequeued job is dropped.

        Returns:
            The next job id, or None on shutdown.

        Raises:
            DispatchQueueClosed: If the queue is closed and drained.
        """
        get_task = asyncio.create_task(self.job_queue.next_job_id())
        stop_task = asyncio.create_task(self._shutdown.wait())

        try:
            await asyncio.wait(
                {get_task, stop_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in (get_task, stop_task):
                if not task.done():
                    task.cancel()
                    try:
                        await task
                    except asyncio.CancelledError:
                        pass

        if get_task.cancelled():
            return None
        return get_task.result()

    async def _process_job(self, worker_id: str, job_id: str) -> None:
        """
        Execute a single job.

        Handles the full lifecycle:
        1. Transition to PROCESSING
        2. Run the executor
        3. Mark as DONE or hand the failure to the retry protocol

        Args:
            worker_id: Id of the executing worker.
            job_id: The dequeued job id.
        """
        job = self.job_queue.start_job(job_id)
        if job is None:
            logger.info(
                "Skipping deleted job",
                extra={"worker_id": worker_id, "job_id": job_id}
            )
            return

        context = JobContext.from_job(job, worker_id)

        logger.info(
            "Executing job",
            extra={
                "job_id": job_id,
                "job_type": job.type,
                "attempt": context.attempt,
            }
        )

        self._busy.add(worker_id)
        self._metrics.worker_busy()
        start_time = time.monotonic()
        try:
            with get_tracer().start_as_current_span(SPAN_EXECUTE_JOB) as span:
                span.set_attribute("job_id", job_id)
                span.set_attribute("job_type", job.type)
                span.set_attribute("attempt", context.attempt)

                try:
                    result = await self.executor(context)
                except Exception as e:
                    logger.exception(
                        "Executor raised exception",
                        extra={"job_id": job_id, "error": str(e)}
                    )
                    result = JobResult(success=False, error=f"Worker exception: {str(e)}")

                span.set_attribute("success", result.success)
        finally:
            self._busy.discard(worker_id)
            self._metrics.worker_idle()

        duration = time.monotonic() - start_time

        if result.success:
            self.job_queue.complete_job(job_id)
            logger.info(
                "Job completed successfully",
                extra={"job_id": job_id, "duration": f"{duration:.2f}s"}
            )
            self._metrics.record_job_completed(
                job_type=job.type,
                status=JobStatus.DONE,
                duration_seconds=duration,
            )
            return

        updated = self.job_queue.fail_job(job_id, result.error or "Unknown error")
        final_status = updated.status if updated else JobStatus.FAILED

        if final_status == JobStatus.FAILED:
            logger.warning(
                "Job failed permanently",
                extra={"job_id": job_id, "error": result.error, "attempt": context.attempt}
            )
        else:
            logger.warning(
                "Job failed, retry scheduled",
                extra={"job_id": job_id, "error": result.error, "attempt": context.attempt}
            )

        self._metrics.record_job_completed(
            job_type=job.type,
            status=final_status,
            duration_seconds=duration,
        )
