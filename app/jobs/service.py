from dataclasses import dataclass

import psycopg

from app.config.settings import Settings
from app.database.models import JobRecord, JobStatus
from app.database.repositories.job_repository import JobRepository
from app.jobs.claim_registrar import ClaimRegistrar, ClaimResult
from app.jobs.dedup import DedupCache
from app.jobs.exceptions import (
    JobNotFoundError,
    RejectionReason,
    RetryRejectedError,
    ServiceUnavailableError,
)
from app.jobs.retry_policy import RetryPolicy, RetryResult
from app.messaging.base import BaseQueue
from app.notifications.cache_invalidator import CacheInvalidator
from app.storage.base import BaseStorage

_IN_PROGRESS_STATUSES = frozenset(
    {JobStatus.PENDING_CLAIM, JobStatus.QUEUED, JobStatus.PROCESSING}
)


@dataclass(frozen=True)
class JobStatusView:
    """What the owner is shown while polling a job."""

    job_id: str
    status: str
    error_message: str | None
    error_type: str | None
    can_retry: bool
    retry_count: int
    total_attempts: int
    user_message: str


def user_message_for(job: JobRecord, rejection: RetryRejectedError | None = None) -> str:
    """Human-readable status line; distinguishes permanent failures from spent budgets."""
    if job.status == JobStatus.COMPLETED:
        return "Your resume is ready."
    if job.status in _IN_PROGRESS_STATUSES:
        return "Your resume is being processed."
    if rejection is None:
        return "Processing failed. You may retry."
    if rejection.reason is RejectionReason.PERMANENT_ERROR:
        return f"This file cannot be processed: {job.error_message or 'unsupported content'}"
    if rejection.reason is RejectionReason.BUDGET_EXCEEDED:
        return "Please upload your resume again."
    return "Processing failed."


class ResumeService:
    """Operations offered to the web layer: claim an upload, poll it, retry it."""

    def __init__(
        self,
        claim_registrar: ClaimRegistrar,
        retry_policy: RetryPolicy,
        job_repo: JobRepository,
    ) -> None:
        self._claim_registrar = claim_registrar
        self._retry_policy = retry_policy
        self._job_repo = job_repo

    def claim(self, owner_id: str, storage_key: str, data: bytes | None = None) -> ClaimResult:
        return self._claim_registrar.claim(owner_id, storage_key, data=data)

    def get_status(self, job_id: str) -> JobStatusView:
        """Current state of a job and whether the owner may retry it.

        Raises:
            JobNotFoundError: if the job does not exist.
            ServiceUnavailableError: if the store is unreachable.
        """
        try:
            job = self._job_repo.find_by_id(job_id)
        except psycopg.Error as exc:
            raise ServiceUnavailableError(f"Store unavailable: {exc}") from exc
        if job is None:
            raise JobNotFoundError(f"Job {job_id} not found")

        rejection = None
        if job.status == JobStatus.FAILED:
            rejection = self._retry_policy.evaluate(job, manual=True)
        return JobStatusView(
            job_id=job.id,
            status=job.status,
            error_message=job.error_message,
            error_type=job.last_attempt_error.type if job.last_attempt_error else None,
            can_retry=job.status == JobStatus.FAILED and rejection is None,
            retry_count=job.retry_count,
            total_attempts=job.total_attempts,
            user_message=user_message_for(job, rejection),
        )

    def retry(self, job_id: str) -> RetryResult:
        return self._retry_policy.retry(job_id)


def build_service(
    settings: Settings,
    storage: BaseStorage,
    queue: BaseQueue,
    cache_invalidator: CacheInvalidator | None = None,
) -> ResumeService:
    """Wire a ResumeService on the shared connection pool."""
    job_repo = JobRepository()
    claim_registrar = ClaimRegistrar(
        job_repo=job_repo,
        dedup_cache=DedupCache(job_repo),
        queue=queue,
        storage=storage,
        cache_invalidator=cache_invalidator or CacheInvalidator.from_settings(settings),
        settings=settings,
    )
    retry_policy = RetryPolicy(job_repo, queue, storage, settings)
    return ResumeService(claim_registrar, retry_policy, job_repo)
