"""
Type definitions for the job queue.
Contains input/output type definitions for all functions, grouped by module.
"""

from jobqueue.types.api import (
    CreateJobRequest,
    CreateJobResponse,
    ErrorResponse,
    HealthResponse,
    JobListResponse,
    JobResponse,
    JobStatsResponse,
    LogsResponse,
)
from jobqueue.types.events import LogEntry, LogSink
from jobqueue.types.job import (
    Job,
    JobContext,
    JobResult,
)

__all__ = [
    # API types
    "CreateJobRequest",
    "CreateJobResponse",
    "JobResponse",
    "JobListResponse",
    "JobStatsResponse",
    "LogsResponse",
    "HealthResponse",
    "ErrorResponse",
    # Job types
    "Job",
    "JobResult",
    "JobContext",
    # Event types
    "LogEntry",
    "LogSink",
]
