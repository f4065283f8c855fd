"""
API routes module.
"""

from jobqueue.api.routes.health import router as health_router
from jobqueue.api.routes.jobs import router as jobs_router
from jobqueue.api.routes.logs import router as logs_router

__all__ = ["jobs_router", "logs_router", "health_router"]
