"""
Unit tests for the job model and its lifecycle.
"""

import pytest

from jobqueue.constants import RETRY_EXHAUSTED_MESSAGE, JobStatus
from jobqueue.exceptions import InvalidTransitionError
from jobqueue.types.job import Job, JobContext


class TestJob:
    """Tests for Job."""

    def test_defaults(self):
        """Test a new job starts pending with an empty retry count."""
        job = Job(type="email", payload="x")

        assert job.status == JobStatus.PENDING
        assert job.retry_count == 0
        assert job.max_retries == 3
        assert job.error_message is None
        assert job.created_at.tzinfo is not None
        assert job.id

    def test_ids_are_unique(self):
        """Test each job gets a fresh id."""
        ids = {Job(type="email", payload="x").id for _ in range(100)}
        assert len(ids) == 100

    def test_valid_transition_refreshes_updated_at(self):
        """Test a transition changes status and refreshes updated_at."""
        job = Job(type="email", payload="x")
        before = job.updated_at

        job.transition(JobStatus.PROCESSING)

        assert job.status == JobStatus.PROCESSING
        assert job.updated_at >= before

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (JobStatus.PENDING, JobStatus.DONE),
            (JobStatus.DONE, JobStatus.PENDING),
            (JobStatus.DONE, JobStatus.PROCESSING),
            (JobStatus.FAILED, JobStatus.PENDING),
            (JobStatus.FAILED, JobStatus.DONE),
        ],
    )
    def test_invalid_transition(self, current: JobStatus, target: JobStatus):
        """Test forbidden transitions raise."""
        job = Job(type="email", payload="x", status=current)

        with pytest.raises(InvalidTransitionError):
            job.transition(target)

        assert job.status == current

    def test_same_status_is_idempotent(self):
        """Test repeating the current status is accepted."""
        job = Job(type="email", payload="x", status=JobStatus.DONE)

        job.transition(JobStatus.DONE)

        assert job.status == JobStatus.DONE

    def test_error_message_kept_unless_overwritten(self):
        """Test error messages are only replaced when a new one is given."""
        job = Job(type="email", payload="x", status=JobStatus.PROCESSING)

        job.transition(JobStatus.PENDING, error_message="first")
        job.transition(JobStatus.PROCESSING)

        assert job.error_message == "first"

        job.transition(JobStatus.DONE, clear_error=True)

        assert job.error_message is None

    def test_register_failure_retries_until_budget_exhausted(self):
        """Test a job retries max_retries times then fails."""
        job = Job(type="email", payload="x", max_retries=3)

        statuses = []
        for attempt in range(1, 5):
            job.transition(JobStatus.PROCESSING)
            statuses.append(job.register_failure(f"error {attempt}"))

        assert statuses == [
            JobStatus.PENDING,
            JobStatus.PENDING,
            JobStatus.PENDING,
            JobStatus.FAILED,
        ]
        assert job.retry_count == 3
        assert job.error_message.startswith(RETRY_EXHAUSTED_MESSAGE)
        assert "error 4" in job.error_message

    def test_register_failure_with_zero_budget(self):
        """Test a job without retries fails on its first failure."""
        job = Job(type="email", payload="x", max_retries=0, status=JobStatus.PROCESSING)

        assert job.register_failure("nope") == JobStatus.FAILED
        assert job.retry_count == 0


class TestJobContext:
    """Tests for JobContext."""

    def test_from_job(self):
        """Test building a context from a job snapshot."""
        job = Job(type="report", payload="q3", retry_count=1)

        context = JobContext.from_job(job, "worker-1")

        assert context.job_id == job.id
        assert context.job_type == "report"
        assert context.payload == "q3"
        assert context.worker_id == "worker-1"

    def test_attempt_numbers(self):
        """Test attempt, is_last_attempt and remaining_retries."""
        context = JobContext(
            job_id="job",
            job_type="email",
            payload="x",
            retry_count=1,
            max_retries=3,
            worker_id="worker-1",
        )

        assert context.attempt == 2
        assert context.is_last_attempt is False
        assert context.remaining_retries == 2

        context.retry_count = 3
        assert context.is_last_attempt is True
        assert context.remaining_retries == 0
