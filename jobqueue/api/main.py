"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobqueue import __version__
from jobqueue.api.routes import health_router, jobs_router, logs_router
from jobqueue.config import get_settings
from jobqueue.core.service import JobQueue
from jobqueue.observability.logging import setup_logging
from jobqueue.observability.metrics import setup_metrics
from jobqueue.observability.tracing import instrument_fastapi, setup_tracing
from jobqueue.worker.pool import WorkerPool

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Starts the worker pool on startup. On shutdown the dispatch queue is
    closed first, then the pool is stopped and waited for.
    """
    # Startup
    setup_logging()
    setup_metrics()
    setup_tracing()

    job_queue: JobQueue = app.state.job_queue
    worker_pool: WorkerPool = app.state.worker_pool
    worker_pool.start()

    logger.info(
        "Application started",
        extra={
            "queue_capacity": job_queue.dispatch.capacity,
            "worker_count": worker_pool.worker_count,
        }
    )

    yield

    # Shutdown
    job_queue.close()
    await worker_pool.stop()
    logger.info("Application shutdown")


def create_app(
    job_queue: JobQueue | None = None,
    worker_pool: WorkerPool | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        job_queue: Queue core to serve. Built from settings if not provided.
        worker_pool: Pool draining the queue. Built from settings if not
            provided.

    Returns:
        FastAPI: The configured application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Job Queue API",
        description="In-process asynchronous job queue with a bounded dispatch queue and worker pool",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.job_queue = job_queue or JobQueue.from_settings(settings)
    app.state.worker_pool = worker_pool or WorkerPool(
        app.state.job_queue,
        worker_count=settings.worker_count,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(jobs_router)
    app.include_router(logs_router)

    instrument_fastapi(app)

    return app


def run() -> None:
    """Run the API server."""
    settings = get_settings()

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


# Create app instance for uvicorn
app = create_app()


if __name__ == "__main__":
    run()
