"""
Pytest configuration and shared fixtures.
"""

import asyncio
import os
from collections.abc import AsyncGenerator, Awaitable, Callable

# Configure settings BEFORE any imports that read them
os.environ["EXECUTION_LATENCY_SCALE"] = "0"
os.environ["EVENT_LOG_ECHO"] = "false"

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from jobqueue.api.main import create_app
from jobqueue.config import Settings, get_settings
from jobqueue.constants import JobStatus
from jobqueue.core.service import JobQueue
from jobqueue.types.job import Job, JobContext, JobResult
from jobqueue.worker.pool import JobExecutor, WorkerPool

get_settings.cache_clear()


async def _succeed(context: JobContext) -> JobResult:
    return JobResult(success=True, output={"attempt": context.attempt})


async def _fail(context: JobContext) -> JobResult:
    return JobResult(success=False, error=f"boom on attempt {context.attempt}")


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        queue_capacity=100,
        worker_count=3,
        default_max_retries=3,
        execution_latency_scale=0.0,
        event_log_echo=False,
        log_level="DEBUG",
        log_format="console",
    )


@pytest.fixture
def succeed_executor() -> JobExecutor:
    """Executor whose every attempt succeeds."""
    return _succeed


@pytest.fixture
def fail_executor() -> JobExecutor:
    """Executor whose every attempt fails."""
    return _fail


@pytest.fixture
def job_queue(test_settings: Settings) -> JobQueue:
    """Create a job queue with room for 100 jobs."""
    return JobQueue.from_settings(test_settings)


@pytest.fixture
def wait_for_status() -> Callable[..., Awaitable[Job]]:
    """Poll a job until it reaches one of the given statuses."""

    async def wait(
        job_queue: JobQueue,
        job_id: str,
        *statuses: JobStatus,
        timeout: float = 2.0,
    ) -> Job:
        async with asyncio.timeout(timeout):
            while True:
                job = job_queue.get(job_id)
                if job is not None and job.status in statuses:
                    return job
                await asyncio.sleep(0.005)

    return wait


@pytest_asyncio.fixture
async def app(
    job_queue: JobQueue,
    succeed_executor: JobExecutor,
) -> AsyncGenerator[FastAPI]:
    """Create a FastAPI app backed by a running worker pool."""
    worker_pool = WorkerPool(job_queue, worker_count=3, executor=succeed_executor)
    app = create_app(job_queue=job_queue, worker_pool=worker_pool)

    worker_pool.start()
    yield app

    job_queue.close()
    await worker_pool.stop()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def idle_client() -> AsyncGenerator[AsyncClient]:
    """
    HTTP client for an app whose workers never run.

    The dispatch queue holds two jobs, so the third submission is rejected.
    """
    job_queue = JobQueue(capacity=2)
    worker_pool = WorkerPool(job_queue, worker_count=1)
    app = create_app(job_queue=job_queue, worker_pool=worker_pool)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
