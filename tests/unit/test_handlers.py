"""
Unit tests for job handlers.
"""

import pytest

from jobqueue.types.job import JobContext, JobResult
from jobqueue.worker.handlers import (
    EMAIL_PROFILE,
    SimulationProfile,
    execute_job,
    get_handler,
    handle_default,
    handle_echo,
    handle_email,
    handle_failing_job,
    list_handlers,
    register_handler,
    simulate_execution,
)


class FixedRandom:
    """Random source returning preset values."""

    def __init__(self, draw: float):
        self.draw = draw

    def uniform(self, a: float, b: float) -> float:
        return a

    def random(self) -> float:
        return self.draw


class TestJobHandlers:
    """Tests for job handlers."""

    @pytest.fixture
    def job_context(self) -> JobContext:
        """Create a test job context."""
        return JobContext(
            job_id="job-1",
            job_type="echo",
            payload="hello",
            retry_count=0,
            max_retries=3,
            worker_id="worker-1",
        )

    def test_list_handlers(self):
        """Test listing registered handlers."""
        handlers = list_handlers()

        assert "email" in handlers
        assert "notification" in handlers
        assert "report" in handlers
        assert "echo" in handlers
        assert "failing_job" in handlers

    def test_get_handler_exists(self):
        """Test getting an existing handler."""
        assert get_handler("email") == handle_email

    def test_get_handler_unknown_type_uses_default(self):
        """Test unknown job types fall back to the default profile."""
        assert get_handler("thumbnail") == handle_default

    @pytest.mark.asyncio
    async def test_echo_handler(self, job_context: JobContext):
        """Test the echo handler."""
        result = await handle_echo(job_context)

        assert result.success is True
        assert result.output == {"echo": "hello"}

    @pytest.mark.asyncio
    async def test_failing_handler(self, job_context: JobContext):
        """Test the failing job handler."""
        result = await handle_failing_job(job_context)

        assert result.success is False
        assert "Intentional failure on attempt 1" in result.error

    @pytest.mark.asyncio
    async def test_simulate_success(self, job_context: JobContext):
        """Test a draw below the success rate succeeds."""
        result = await simulate_execution(
            job_context,
            EMAIL_PROFILE,
            rng=FixedRandom(0.0),
            latency_scale=0,
        )

        assert result.success is True
        assert result.duration_ms == 0

    @pytest.mark.asyncio
    async def test_simulate_failure(self, job_context: JobContext):
        """Test a draw above the success rate fails."""
        result = await simulate_execution(
            job_context,
            EMAIL_PROFILE,
            rng=FixedRandom(0.95),
            latency_scale=0,
        )

        assert result.success is False
        assert "attempt 1" in result.error

    @pytest.mark.asyncio
    async def test_simulate_latency_is_scaled(self, job_context: JobContext):
        """Test simulated latency honours the scale factor."""
        profile = SimulationProfile(min_seconds=1.0, max_seconds=2.0, success_rate=1.0)

        result = await simulate_execution(
            job_context,
            profile,
            rng=FixedRandom(0.5),
            latency_scale=0.01,
        )

        assert result.success is True
        assert result.duration_ms == pytest.approx(10.0)

    @pytest.mark.asyncio
    async def test_execute_job_with_known_type(self, job_context: JobContext):
        """Test execute_job dispatches on the job type."""
        result = await execute_job(job_context)

        assert result.success is True
        assert result.output == {"echo": "hello"}

    @pytest.mark.asyncio
    async def test_execute_job_with_unknown_type(self, job_context: JobContext):
        """Test execute_job runs unknown types with the default profile."""
        job_context.job_type = "thumbnail"

        result = await execute_job(job_context)

        if result.success:
            assert result.output["job_type"] == "thumbnail"
        else:
            assert "Simulated thumbnail failure" in result.error

    @pytest.mark.asyncio
    async def test_execute_job_handler_exception(self, job_context: JobContext):
        """Test a raising handler becomes a failed result."""

        @register_handler("exploding")
        async def handle_exploding(context: JobContext) -> JobResult:
            raise RuntimeError("kaboom")

        job_context.job_type = "exploding"

        result = await execute_job(job_context)

        assert result.success is False
        assert "Handler exception: kaboom" in result.error
