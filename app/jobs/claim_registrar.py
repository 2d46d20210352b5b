import uuid
from dataclasses import dataclass

import psycopg

from app.config.settings import Settings
from app.database.models import AttemptError, JobStatus
from app.database.repositories.job_repository import JobRepository
from app.jobs.dedup import CacheOutcome, DedupCache
from app.jobs.errors import ErrorType
from app.jobs.exceptions import ClaimRejectedError, ServiceUnavailableError
from app.jobs.hasher import content_hash as hash_bytes
from app.logging.logger import Log
from app.messaging.base import BaseQueue
from app.messaging.exceptions import QueueError
from app.messaging.models import ParseMessage
from app.notifications.cache_invalidator import CacheInvalidator
from app.pdf.base import ensure_pdf
from app.pdf.exceptions import InvalidPdfError, PdfTooLargeError
from app.storage.base import BaseStorage
from app.storage.exceptions import ObjectNotFoundError, StorageError


@dataclass(frozen=True)
class ClaimResult:
    job_id: str
    status: str
    cached: bool = False


class ClaimRegistrar:
    """Registers an uploaded resume as a job and enqueues its first attempt.

    A dedup hit completes the job immediately from the cached result without
    touching the queue. Otherwise the job is inserted as pending_claim, one
    message is published, and only then is the job advanced to queued.
    """

    def __init__(
        self,
        job_repo: JobRepository,
        dedup_cache: DedupCache,
        queue: BaseQueue,
        storage: BaseStorage,
        cache_invalidator: CacheInvalidator,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._dedup_cache = dedup_cache
        self._queue = queue
        self._storage = storage
        self._cache_invalidator = cache_invalidator
        self._settings = settings

    def claim(
        self,
        owner_id: str,
        storage_key: str,
        data: bytes | None = None,
        content_hash: str | None = None,
    ) -> ClaimResult:
        """Claim an upload.

        Raises:
            ClaimRejectedError: if the upload is not an acceptable PDF or is missing.
            ServiceUnavailableError: if storage, store or queue is unreachable.
        """
        digest = self._resolve_digest(storage_key, data, content_hash)

        try:
            lookup = self._dedup_cache.lookup(owner_id, digest)
        except psycopg.Error as exc:
            raise ServiceUnavailableError(f"Store unavailable during dedup lookup: {exc}") from exc

        if lookup.found:
            return self._complete_from_cache(owner_id, storage_key, digest, lookup.content or {})
        if lookup.outcome is CacheOutcome.STALE:
            Log.info(
                f"Cached result of job {lookup.source_job_id} was superseded, reprocessing"
            )
        return self._enqueue(owner_id, storage_key, digest)

    def _resolve_digest(
        self, storage_key: str, data: bytes | None, content_hash: str | None
    ) -> str:
        if data is None and content_hash:
            return content_hash.lower()
        if data is None:
            try:
                data = self._storage.get(storage_key)
            except ObjectNotFoundError as exc:
                raise ClaimRejectedError("file_not_found", f"Upload not found: {storage_key}") from exc
            except StorageError as exc:
                raise ServiceUnavailableError(f"Storage unavailable: {exc}") from exc
        self._validate_upload(data)
        return hash_bytes(data)

    def _validate_upload(self, data: bytes) -> None:
        try:
            ensure_pdf(data, self._settings.max_upload_bytes)
        except PdfTooLargeError as exc:
            raise ClaimRejectedError("file_too_large", str(exc)) from exc
        except InvalidPdfError as exc:
            raise ClaimRejectedError("invalid_pdf", str(exc)) from exc

    def _complete_from_cache(
        self, owner_id: str, storage_key: str, digest: str, content: dict[str, object]
    ) -> ClaimResult:
        job_id = str(uuid.uuid4())
        try:
            self._job_repo.insert_completed_from_cache(job_id, owner_id, storage_key, digest, content)
        except psycopg.Error as exc:
            raise ServiceUnavailableError(f"Store unavailable: {exc}") from exc
        Log.info(f"Job {job_id} completed from cache for owner {owner_id}")
        self._cache_invalidator.invalidate(owner_id)
        return ClaimResult(job_id=job_id, status=JobStatus.COMPLETED, cached=True)

    def _enqueue(self, owner_id: str, storage_key: str, digest: str) -> ClaimResult:
        job_id = str(uuid.uuid4())
        try:
            self._job_repo.insert_pending(job_id, owner_id, storage_key, digest)
        except psycopg.Error as exc:
            raise ServiceUnavailableError(f"Store unavailable: {exc}") from exc

        message = ParseMessage(
            job_id=job_id,
            owner_id=owner_id,
            storage_key=storage_key,
            content_hash=digest,
            attempt_number=1,
        )
        try:
            self._queue.publish(message)
        except QueueError as exc:
            self._fail_unpublished(job_id, exc)
            raise ServiceUnavailableError(f"Queue unavailable: {exc}") from exc

        try:
            queued = self._job_repo.mark_queued(job_id)
        except psycopg.Error as exc:
            Log.error(f"Job {job_id} published but status write failed, left for reconciler: {exc}")
            return ClaimResult(job_id=job_id, status=JobStatus.PENDING_CLAIM)

        if not queued:
            Log.warning(f"Job {job_id} was no longer pending_claim after publish")
            return ClaimResult(job_id=job_id, status=self._current_status(job_id))

        Log.info(f"Job {job_id} queued for owner {owner_id}")
        return ClaimResult(job_id=job_id, status=JobStatus.QUEUED)

    def _fail_unpublished(self, job_id: str, exc: QueueError) -> None:
        error = AttemptError(type=ErrorType.QUEUE_UNAVAILABLE, message=f"Queue unavailable: {exc}")
        try:
            self._job_repo.mark_claim_failed(job_id, error)
        except psycopg.Error as db_exc:
            Log.error(f"Job {job_id} could not be marked failed after publish error: {db_exc}")
            return
        Log.error(f"Job {job_id} failed: message could not be published: {exc}")

    def _current_status(self, job_id: str) -> str:
        try:
            job = self._job_repo.find_by_id(job_id)
        except psycopg.Error as exc:
            Log.warning(f"Could not re-read job {job_id}: {exc}")
            return JobStatus.PENDING_CLAIM
        return job.status if job else JobStatus.PENDING_CLAIM
