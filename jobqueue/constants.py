"""
Application constants.
Centralized location for all constant values used across the application.
"""

from enum import StrEnum


class JobStatus(StrEnum):
    """
    Job lifecycle states.

    State transitions:
    - PENDING -> PROCESSING (dequeued by a worker)
    - PROCESSING -> DONE (success)
    - PROCESSING -> PENDING (retry)
    - PROCESSING -> FAILED (retry budget exhausted)
    - PENDING -> FAILED (retry dispatch rejected by a full queue)
    """

    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"


# Allowed lifecycle transitions. Same-state updates are always accepted.
VALID_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset(
        {JobStatus.DONE, JobStatus.PENDING, JobStatus.FAILED}
    ),
    JobStatus.DONE: frozenset(),
    JobStatus.FAILED: frozenset(),
}

TERMINAL_STATUSES = frozenset({JobStatus.DONE, JobStatus.FAILED})

# Default values
DEFAULT_MAX_RETRIES = 3
DEFAULT_QUEUE_CAPACITY = 100
DEFAULT_WORKER_COUNT = 3

# Error messages recorded on jobs
QUEUE_FULL_MESSAGE = "queue full"
QUEUE_CLOSED_MESSAGE = "queue closed"
RETRY_EXHAUSTED_MESSAGE = "Max retries exceeded"
RETRY_DISPATCH_REJECTED_MESSAGE = "Retry dispatch rejected: queue full"

# Event log
LOG_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
EVENT_LOGGER_NAME = "jobqueue.events"

# API constants
API_V1_PREFIX = "/v1"
EXPORT_FILENAME = "jobs-export.json"

# Metrics names
METRIC_QUEUE_DEPTH = "dispatch_queue_depth"
METRIC_JOBS_SUBMITTED = "jobs_submitted_total"
METRIC_JOBS_REJECTED = "jobs_rejected_total"
METRIC_JOBS_COMPLETED = "jobs_completed_total"
METRIC_JOB_RETRIES = "job_retries_total"
METRIC_JOB_DURATION = "job_duration_seconds"
METRIC_WORKERS_BUSY = "workers_busy"

# Trace span names
SPAN_EXECUTE_JOB = "execute_job"
