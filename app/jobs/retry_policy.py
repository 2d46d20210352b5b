from dataclasses import dataclass

import psycopg

from app.config.settings import Settings
from app.database.models import JobRecord, JobStatus
from app.database.repositories.job_repository import JobRepository
from app.jobs.errors import is_permanent_error_type
from app.jobs.exceptions import (
    JobNotFoundError,
    RejectionReason,
    RetryRejectedError,
    ServiceUnavailableError,
)
from app.jobs.hasher import content_hash
from app.logging.logger import Log
from app.messaging.base import BaseQueue
from app.messaging.exceptions import QueueError
from app.messaging.models import ParseMessage
from app.storage.base import BaseStorage
from app.storage.exceptions import ObjectNotFoundError, StorageError


@dataclass(frozen=True)
class RetryResult:
    job_id: str
    status: str
    retry_count: int
    total_attempts: int


class RetryPolicy:
    """Decides whether a failed job may run again and performs the re-enqueue.

    Two budgets apply. The total ceiling bounds every attempt of a job,
    however it was enqueued. The manual budget bounds user-initiated retries,
    and automatic retries after transient failures have their own budget.
    Permanent failures are never retried.
    """

    def __init__(
        self,
        job_repo: JobRepository,
        queue: BaseQueue,
        storage: BaseStorage,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._queue = queue
        self._storage = storage
        self._settings = settings

    def evaluate(self, job: JobRecord, manual: bool = True) -> RetryRejectedError | None:
        """Return the reason a retry would be refused, or None if it is allowed."""
        details = {
            "retry_count": job.retry_count,
            "total_attempts": job.total_attempts,
            "manual_max_retries": self._settings.manual_max_retries,
            "total_max_attempts": self._settings.total_max_attempts,
        }
        if job.total_attempts >= self._settings.total_max_attempts:
            return RetryRejectedError(
                RejectionReason.BUDGET_EXCEEDED,
                "Maximum total attempts reached. Please upload your resume again.",
                details,
            )
        error_type = job.last_attempt_error.type if job.last_attempt_error else None
        if is_permanent_error_type(error_type):
            return RetryRejectedError(
                RejectionReason.PERMANENT_ERROR,
                f"This file cannot be processed: {job.error_message or error_type}",
                {**details, "error_type": error_type},
            )
        if job.status != JobStatus.FAILED:
            return RetryRejectedError(
                RejectionReason.STATE_CONFLICT,
                f"Only failed jobs can be retried (current status: {job.status})",
                {**details, "status": str(job.status)},
            )
        if manual and job.retry_count >= self._settings.manual_max_retries:
            return RetryRejectedError(
                RejectionReason.BUDGET_EXCEEDED,
                "Maximum retry attempts reached. Please upload your resume again.",
                details,
            )
        auto_retries_used = job.total_attempts - job.retry_count - 1
        if not manual and auto_retries_used >= self._settings.auto_max_retries:
            return RetryRejectedError(
                RejectionReason.BUDGET_EXCEEDED,
                "Automatic retry budget exhausted",
                {**details, "auto_max_retries": self._settings.auto_max_retries},
            )
        return None

    def can_retry(self, job: JobRecord) -> bool:
        return job.status == JobStatus.FAILED and self.evaluate(job, manual=True) is None

    def retry(self, job_id: str) -> RetryResult:
        """Manual retry requested by the job's owner.

        Raises:
            JobNotFoundError: if the job does not exist.
            RetryRejectedError: if the job is not eligible.
            ServiceUnavailableError: if storage, store or queue is unreachable.
        """
        try:
            job = self._job_repo.find_by_id(job_id)
        except psycopg.Error as exc:
            raise ServiceUnavailableError(f"Store unavailable: {exc}") from exc
        if job is None:
            raise JobNotFoundError(f"Job {job_id} not found")

        rejection = self.evaluate(job, manual=True)
        if rejection is not None:
            Log.info(f"Retry of job {job_id} rejected: {rejection.reason}")
            raise rejection
        return self._requeue(job, manual=True)

    def retry_automatic(self, job: JobRecord) -> RetryResult | None:
        """Re-enqueue after a transient failure, if budgets allow. Never raises."""
        rejection = self.evaluate(job, manual=False)
        if rejection is not None:
            Log.info(f"No automatic retry for job {job.id}: {rejection.message}")
            return None
        try:
            result = self._requeue(job, manual=False)
        except (RetryRejectedError, ServiceUnavailableError) as exc:
            Log.warning(f"Automatic retry of job {job.id} failed: {exc}")
            return None
        Log.info(f"Job {job.id} automatically re-queued (attempt {result.total_attempts})")
        return result

    def _requeue(self, job: JobRecord, manual: bool) -> RetryResult:
        digest = self._resolve_content_hash(job)
        attempt_number = job.total_attempts + 1
        message = ParseMessage(
            job_id=job.id,
            owner_id=job.owner_id,
            storage_key=job.storage_key,
            content_hash=digest,
            attempt_number=attempt_number,
        )
        # Published inside the conditional transition: only the winning retry enqueues.
        try:
            updated = self._job_repo.requeue(
                job.id,
                expected_total_attempts=job.total_attempts,
                expected_retry_count=job.retry_count,
                manual=manual,
                enqueue=lambda conn: self._queue.publish(message, conn=conn),
            )
        except QueueError as exc:
            raise ServiceUnavailableError(f"Queue unavailable: {exc}") from exc
        except psycopg.Error as exc:
            raise ServiceUnavailableError(f"Store unavailable: {exc}") from exc
        if not updated:
            raise RetryRejectedError(
                RejectionReason.STATE_CONFLICT,
                "Job changed while the retry was being processed",
                {"retry_count": job.retry_count, "total_attempts": job.total_attempts},
            )

        retry_count = job.retry_count + 1 if manual else job.retry_count
        Log.info(f"Job {job.id} re-queued (attempt {attempt_number}, retries {retry_count})")
        return RetryResult(
            job_id=job.id,
            status=JobStatus.QUEUED,
            retry_count=retry_count,
            total_attempts=attempt_number,
        )

    def _resolve_content_hash(self, job: JobRecord) -> str:
        if job.content_hash:
            return job.content_hash
        # Legacy rows predate hashing at claim time.
        try:
            data = self._storage.get(job.storage_key)
        except ObjectNotFoundError as exc:
            raise RetryRejectedError(
                RejectionReason.PERMANENT_ERROR,
                "The uploaded file no longer exists. Please upload your resume again.",
                {"storage_key": job.storage_key},
            ) from exc
        except StorageError as exc:
            raise ServiceUnavailableError(f"Storage unavailable: {exc}") from exc
        digest = content_hash(data)
        try:
            self._job_repo.set_content_hash(job.id, digest)
        except psycopg.Error as exc:
            raise ServiceUnavailableError(f"Store unavailable: {exc}") from exc
        Log.info(f"Backfilled content hash for legacy job {job.id}")
        return digest
