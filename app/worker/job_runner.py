import contextvars
import queue
import threading

from app.config.settings import Settings
from app.database.repositories.job_repository import JobRepository
from app.jobs.dedup import DedupCache
from app.jobs.errors import classify_error, is_permanent_error_type
from app.jobs.exceptions import AttemptTimeoutError
from app.jobs.retry_policy import RetryPolicy
from app.logging.logger import Log
from app.messaging.models import ParseMessage
from app.notifications.cache_invalidator import CacheInvalidator
from app.processor.models import ProcessorResult
from app.processor.processor import Processor


class JobRunner:
    """Run one attempt, record its outcome, and trigger follow-ups.

    Attempt exceptions never escape: they are classified and written as a
    failed outcome. Only a failing terminal write propagates, so the message
    is redelivered.
    """

    def __init__(
        self,
        processor: Processor,
        job_repo: JobRepository,
        dedup_cache: DedupCache,
        retry_policy: RetryPolicy,
        cache_invalidator: CacheInvalidator,
        settings: Settings,
    ) -> None:
        self._processor = processor
        self._job_repo = job_repo
        self._dedup_cache = dedup_cache
        self._retry_policy = retry_policy
        self._cache_invalidator = cache_invalidator
        self._settings = settings

    def run(self, message: ParseMessage) -> None:
        """Execute a single attempt with error handling."""
        Log.info(f"Running job {message.job_id} (attempt {message.attempt_number})")
        try:
            result = self._cached_result(message) or self._run_with_deadline(message)
        except Exception as exc:
            self._handle_failure(message, exc)
            return
        self._handle_success(message, result)

    def _cached_result(self, message: ParseMessage) -> ProcessorResult | None:
        """Result of an identical upload by the same owner that completed while this job waited."""
        lookup = self._dedup_cache.lookup(message.owner_id, message.content_hash)
        if not lookup.found or lookup.source_job_id == message.job_id:
            return None
        Log.info(f"Job {message.job_id} matches completed job {lookup.source_job_id}, skipping parse")
        return ProcessorResult(
            job_id=message.job_id,
            attempt_number=message.attempt_number,
            content=dict(lookup.content or {}),
            source_job_id=lookup.source_job_id,
        )

    def _run_with_deadline(self, message: ParseMessage) -> ProcessorResult:
        timeout = self._settings.attempt_timeout_seconds
        outcome: queue.SimpleQueue[ProcessorResult | Exception] = queue.SimpleQueue()

        def attempt() -> None:
            try:
                outcome.put(self._processor.process(message))
            except Exception as exc:
                outcome.put(exc)

        # Log.context() fields carry over into the attempt thread. A timed-out
        # attempt keeps running in the background but never blocks shutdown.
        context = contextvars.copy_context()
        threading.Thread(
            target=context.run,
            args=(attempt,),
            name=f"attempt-{message.job_id[:8]}",
            daemon=True,
        ).start()
        try:
            result = outcome.get(timeout=timeout)
        except queue.Empty as exc:
            raise AttemptTimeoutError(f"Attempt exceeded the {timeout}s time limit") from exc
        if isinstance(result, Exception):
            raise result
        return result

    def _handle_success(self, message: ParseMessage, result: ProcessorResult) -> None:
        written = self._job_repo.mark_completed(
            message.job_id,
            message.attempt_number,
            message.owner_id,
            result.content,
        )
        if not written:
            Log.info(
                f"Job {message.job_id} attempt {message.attempt_number} already finished elsewhere, "
                "result dropped"
            )
            return
        if result.source_job_id is not None:
            Log.info(f"Job {message.job_id} completed from the result of job {result.source_job_id}")
        else:
            Log.info(
                f"Job {message.job_id} completed successfully "
                f"({result.extracted_chars} chars, truncated={result.truncated})"
            )
        self._cache_invalidator.invalidate(message.owner_id)

    def _handle_failure(self, message: ParseMessage, exc: Exception) -> None:
        """Record the failure; re-enqueue automatically if it was transient."""
        error = classify_error(exc)
        Log.error(f"Job {message.job_id} attempt {message.attempt_number} failed [{error.type}]: {exc}")
        written = self._job_repo.mark_failed(message.job_id, message.attempt_number, error)
        if not written:
            Log.info(f"Job {message.job_id} attempt {message.attempt_number} already finished elsewhere")
            return
        if is_permanent_error_type(error.type):
            Log.error(f"Job {message.job_id} permanently failed: {error.message}")
            return

        job = self._job_repo.find_by_id(message.job_id)
        if job is not None:
            self._retry_policy.retry_automatic(job)
