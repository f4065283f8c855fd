"""
Health check routes.
"""

from fastapi import APIRouter
from fastapi.responses import Response

from jobqueue import __version__
from jobqueue.api.deps import JobQueueDep, WorkerPoolDep
from jobqueue.observability.metrics import get_metrics
from jobqueue.types.api import HealthResponse
from jobqueue.types.job import utcnow

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health of the worker pool and dispatch queue.",
)
async def health_check(job_queue: JobQueueDep, worker_pool: WorkerPoolDep) -> HealthResponse:
    """
    Perform a health check.

    The service is degraded when no worker loop is running or the dispatch
    queue no longer accepts jobs.

    Returns:
        HealthResponse with service status.
    """
    healthy = worker_pool.running and not job_queue.dispatch.closed

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=__version__,
        workers=worker_pool.worker_count,
        busy_workers=worker_pool.busy_workers,
        queue_closed=job_queue.dispatch.closed,
        timestamp=utcnow(),
    )


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if the service is ready to receive traffic.",
)
async def readiness_check(job_queue: JobQueueDep, worker_pool: WorkerPoolDep) -> dict:
    """
    Kubernetes readiness probe endpoint.

    Returns:
        Ready status.
    """
    return {"ready": worker_pool.running and not job_queue.dispatch.closed}


@router.get(
    "/live",
    summary="Liveness check",
    description="Check if the service is alive.",
)
async def liveness_check() -> dict:
    """
    Kubernetes liveness probe endpoint.

    Returns:
        Alive status.
    """
    return {"alive": True}


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Expose Prometheus metrics.",
)
async def metrics() -> Response:
    """
    Expose Prometheus metrics.

    Returns:
        Prometheus-formatted metrics.
    """
    metrics_collector = get_metrics()
    return Response(
        content=metrics_collector.get_metrics(),
        media_type=metrics_collector.get_content_type(),
    )
