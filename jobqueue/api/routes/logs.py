"""
Event log routes.
"""

from fastapi import APIRouter

from jobqueue.api.deps import JobQueueDep
from jobqueue.constants import API_V1_PREFIX
from jobqueue.types.api import LogsResponse

router = APIRouter(prefix=API_V1_PREFIX, tags=["Logs"])


@router.get(
    "/logs",
    response_model=LogsResponse,
    summary="Get event log",
    description="Get the lifecycle event log in append order.",
)
async def get_logs(job_queue: JobQueueDep) -> LogsResponse:
    """Get a snapshot of the event log."""
    lines = job_queue.logs()
    return LogsResponse(logs=lines, total=len(lines))
