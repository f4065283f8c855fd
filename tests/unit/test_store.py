"""
Unit tests for the job store.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from jobqueue.constants import RETRY_EXHAUSTED_MESSAGE, JobStatus
from jobqueue.core.store import JobStore
from jobqueue.exceptions import DuplicateJobError, InvalidTransitionError
from jobqueue.types.job import Job


class TestJobStore:
    """Tests for JobStore."""

    @pytest.fixture
    def store(self) -> JobStore:
        """Create an empty store."""
        return JobStore()

    def test_insert_and_get(self, store: JobStore):
        """Test a stored job can be looked up."""
        job = store.insert(Job(type="email", payload="x"))

        found = store.get(job.id)

        assert found is not None
        assert found.id == job.id
        assert found.payload == "x"

    def test_get_missing_returns_none(self, store: JobStore):
        """Test a lookup miss is not an error."""
        assert store.get("missing") is None

    def test_insert_duplicate_id(self, store: JobStore):
        """Test inserting an existing id raises."""
        job = store.insert(Job(type="email", payload="x"))

        with pytest.raises(DuplicateJobError):
            store.insert(Job(id=job.id, type="email", payload="y"))

        assert store.get(job.id).payload == "x"

    def test_returned_jobs_are_copies(self, store: JobStore):
        """Test mutating a returned job does not touch the stored one."""
        job = store.insert(Job(type="email", payload="x"))

        snapshot = store.get(job.id)
        snapshot.status = JobStatus.DONE
        snapshot.retry_count = 99

        stored = store.get(job.id)
        assert stored.status == JobStatus.PENDING
        assert stored.retry_count == 0

    def test_list_jobs_and_filter(self, store: JobStore):
        """Test listing all jobs and filtering by status."""
        first = store.insert(Job(type="email", payload="1"))
        store.insert(Job(type="email", payload="2"))
        store.update_status(first.id, JobStatus.PROCESSING)

        assert len(store.list_jobs()) == 2
        processing = store.list_by_status(JobStatus.PROCESSING)
        assert [job.id for job in processing] == [first.id]
        assert len(store.list_by_status(JobStatus.PENDING)) == 1
        assert store.list_by_status(JobStatus.DONE) == []

    def test_update_status_missing_is_noop(self, store: JobStore):
        """Test updating an absent job does nothing."""
        assert store.update_status("missing", JobStatus.DONE) is None
        assert len(store) == 0

    def test_update_status_sets_error_and_refreshes(self, store: JobStore):
        """Test status, error message and updated_at change together."""
        job = store.insert(Job(type="email", payload="x"))
        store.update_status(job.id, JobStatus.PROCESSING)

        updated = store.update_status(job.id, JobStatus.FAILED, "broken")

        assert updated.status == JobStatus.FAILED
        assert updated.error_message == "broken"
        assert updated.updated_at >= job.updated_at

    def test_update_status_is_idempotent(self, store: JobStore):
        """Test repeating an identical update keeps the same result."""
        job = store.insert(Job(type="email", payload="x"))
        store.update_status(job.id, JobStatus.PROCESSING)

        first = store.update_status(job.id, JobStatus.FAILED, "broken")
        second = store.update_status(job.id, JobStatus.FAILED, "broken")

        assert first.status == second.status == JobStatus.FAILED
        assert first.error_message == second.error_message == "broken"

    def test_update_status_rejects_invalid_transition(self, store: JobStore):
        """Test the store enforces the lifecycle."""
        job = store.insert(Job(type="email", payload="x"))

        with pytest.raises(InvalidTransitionError):
            store.update_status(job.id, JobStatus.DONE)

        assert store.get(job.id).status == JobStatus.PENDING

    def test_record_failure(self, store: JobStore):
        """Test the retry protocol applied through the store."""
        job = store.insert(Job(type="email", payload="x", max_retries=1))

        store.update_status(job.id, JobStatus.PROCESSING)
        retried = store.record_failure(job.id, "first")
        assert retried.status == JobStatus.PENDING
        assert retried.retry_count == 1
        assert retried.error_message == "first"

        store.update_status(job.id, JobStatus.PROCESSING)
        failed = store.record_failure(job.id, "second")
        assert failed.status == JobStatus.FAILED
        assert failed.retry_count == 1
        assert failed.error_message.startswith(RETRY_EXHAUSTED_MESSAGE)

        assert store.record_failure("missing", "error") is None

    def test_delete(self, store: JobStore):
        """Test deleting existing and missing jobs."""
        job = store.insert(Job(type="email", payload="x"))
        other = store.insert(Job(type="email", payload="y"))

        assert store.delete("missing") is False
        assert len(store) == 2

        assert store.delete(job.id) is True
        assert store.get(job.id) is None
        assert job.id not in store
        assert other.id in store
        assert store.delete(job.id) is False

    def test_count_by_status(self, store: JobStore):
        """Test every status is counted, including empty ones."""
        job = store.insert(Job(type="email", payload="x"))
        store.insert(Job(type="email", payload="y"))
        store.update_status(job.id, JobStatus.PROCESSING)

        counts = store.count_by_status()

        assert counts == {
            JobStatus.PENDING: 1,
            JobStatus.PROCESSING: 1,
            JobStatus.DONE: 0,
            JobStatus.FAILED: 0,
        }

    def test_concurrent_inserts_and_reads(self, store: JobStore):
        """Test inserts from many threads are all kept with distinct ids."""
        barrier = threading.Barrier(8)

        def insert_batch(_: int) -> list[str]:
            barrier.wait()
            ids = []
            for i in range(50):
                ids.append(store.insert(Job(type="email", payload=str(i))).id)
                store.list_jobs()
            return ids

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(insert_batch, range(8)))

        inserted = [job_id for batch in results for job_id in batch]
        assert len(set(inserted)) == 400
        assert {job.id for job in store.list_jobs()} == set(inserted)

    def test_concurrent_failures_never_exceed_budget(self, store: JobStore):
        """Test racing failure reports keep retry_count within max_retries."""
        job = store.insert(Job(type="email", payload="x", max_retries=3))

        def fail_once(_: int) -> None:
            try:
                store.update_status(job.id, JobStatus.PROCESSING)
            except InvalidTransitionError:
                return
            store.record_failure(job.id, "error")

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(fail_once, range(40)))

        final = store.get(job.id)
        assert final.retry_count <= final.max_retries
        assert final.status == JobStatus.FAILED
