"""
Worker module.
Contains the worker pool and the job handlers it executes.
"""

from jobqueue.worker.handlers import execute_job, register_handler
from jobqueue.worker.pool import JobExecutor, WorkerPool

__all__ = ["WorkerPool", "JobExecutor", "execute_job", "register_handler"]
