"""
Job handlers registry and implementations.

Execution is simulated: each job type has a latency range and a success
rate. Job types without a registered handler run with the default profile.
Handlers may run several times for the same job when attempts fail.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from jobqueue.config import get_settings
from jobqueue.types.job import JobContext, JobResult

logger = logging.getLogger(__name__)

# Type alias for job handler functions
JobHandler = Callable[[JobContext], Awaitable[JobResult]]

# Handler registry
_handlers: dict[str, JobHandler] = {}

_rng = random.Random()


@dataclass(frozen=True)
class SimulationProfile:
    """Latency range (seconds) and success probability of a job type."""

    min_seconds: float
    max_seconds: float
    success_rate: float


EMAIL_PROFILE = SimulationProfile(min_seconds=2.0, max_seconds=5.0, success_rate=0.90)
NOTIFICATION_PROFILE = SimulationProfile(min_seconds=1.0, max_seconds=3.0, success_rate=0.95)
REPORT_PROFILE = SimulationProfile(min_seconds=3.0, max_seconds=6.0, success_rate=0.85)
DEFAULT_PROFILE = SimulationProfile(min_seconds=1.0, max_seconds=4.0, success_rate=0.90)


def register_handler(job_type: str) -> Callable[[JobHandler], JobHandler]:
    """
    Decorator to register a job handler.

    Args:
        job_type: The job type this handler processes.

    Returns:
        Decorator function.

    Example:
        @register_handler("email")
        async def handle_email(context: JobContext) -> JobResult:
            ...
    """
    def decorator(handler: JobHandler) -> JobHandler:
        _handlers[job_type] = handler
        logger.debug(f"Registered handler for job type: {job_type}")
        return handler
    return decorator


def get_handler(job_type: str) -> JobHandler:
    """
    Get the handler for a job type.

    Args:
        job_type: The job type.

    Returns:
        The registered handler, or the default handler for unknown types.
    """
    return _handlers.get(job_type, handle_default)


def list_handlers() -> list[str]:
    """List all registered job types."""
    return list(_handlers.keys())


async def simulate_execution(
    context: JobContext,
    profile: SimulationProfile,
    *,
    rng: random.Random | None = None,
    latency_scale: float | None = None,
) -> JobResult:
    """
    Simulate a variable-latency operation that fails at random.

    Args:
        context: The job context.
        profile: Latency range and success rate to simulate.
        rng: Random source. Defaults to the module-level generator.
        latency_scale: Latency multiplier. Defaults to the configured one.

    Returns:
        JobResult with the simulated outcome.
    """
    rng = rng or _rng
    if latency_scale is None:
        latency_scale = get_settings().execution_latency_scale

    duration = rng.uniform(profile.min_seconds, profile.max_seconds) * latency_scale
    if duration > 0:
        await asyncio.sleep(duration)

    if rng.random() >= profile.success_rate:
        return JobResult(
            success=False,
            error=f"Simulated {context.job_type} failure on attempt {context.attempt}",
            duration_ms=duration * 1000,
        )

    return JobResult(
        success=True,
        output={"job_type": context.job_type, "attempt": context.attempt},
        duration_ms=duration * 1000,
    )


# ============================================================================
# Built-in job handlers
# ============================================================================


@register_handler("email")
async def handle_email(context: JobContext) -> JobResult:
    """Simulate sending an email."""
    return await simulate_execution(context, EMAIL_PROFILE)


@register_handler("notification")
async def handle_notification(context: JobContext) -> JobResult:
    """Simulate pushing a notification."""
    return await simulate_execution(context, NOTIFICATION_PROFILE)


@register_handler("report")
async def handle_report(context: JobContext) -> JobResult:
    """Simulate generating a report."""
    return await simulate_execution(context, REPORT_PROFILE)


async def handle_default(context: JobContext) -> JobResult:
    """Simulate a job of a type without a dedicated handler."""
    return await simulate_execution(context, DEFAULT_PROFILE)


@register_handler("echo")
async def handle_echo(context: JobContext) -> JobResult:
    """
    Echo handler for testing.

    Always succeeds and returns the payload as output.
    """
    return JobResult(
        success=True,
        output={"echo": context.payload},
    )


@register_handler("failing_job")
async def handle_failing_job(context: JobContext) -> JobResult:
    """
    Handler that always fails - for testing retry logic.
    """
    return JobResult(
        success=False,
        error=f"Intentional failure on attempt {context.attempt}",
    )


async def execute_job(context: JobContext) -> JobResult:
    """
    Execute a job using the appropriate handler.

    Args:
        context: The job context.

    Returns:
        JobResult from the handler. Handler exceptions become failed results.
    """
    handler = get_handler(context.job_type)

    try:
        return await handler(context)
    except Exception as e:
        logger.exception(
            "Handler raised exception",
            extra={"job_id": context.job_id, "error": str(e)}
        )
        return JobResult(
            success=False,
            error=f"Handler exception: {str(e)}",
        )
