"""
FastAPI dependencies giving routes access to the queue core.
"""

from typing import Annotated

from fastapi import Depends, Request

from jobqueue.core.service import JobQueue
from jobqueue.worker.pool import WorkerPool


def get_job_queue(request: Request) -> JobQueue:
    """Get the job queue attached to the application."""
    return request.app.state.job_queue


def get_worker_pool(request: Request) -> WorkerPool:
    """Get the worker pool attached to the application."""
    return request.app.state.worker_pool


JobQueueDep = Annotated[JobQueue, Depends(get_job_queue)]
WorkerPoolDep = Annotated[WorkerPool, Depends(get_worker_pool)]
