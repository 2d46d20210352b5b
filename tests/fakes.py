"""In-memory stand-ins for the store, queue and object storage.

They keep the same conditional-update semantics as the PostgreSQL
implementations so multi-step scenarios can run without a database.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any

from app.config.settings import Settings
from app.database.models import AttemptError, JobRecord, JobStatus, ResultRecord
from app.messaging.base import BaseQueue
from app.messaging.exceptions import QueueUnavailableError
from app.messaging.models import Delivery, ParseMessage
from app.storage.base import BaseStorage
from app.storage.exceptions import ObjectNotFoundError, StorageUnavailableError


def _now() -> datetime:
    return datetime.now(timezone.utc)


def make_settings(**overrides: Any) -> Settings:
    """Settings with defaults only, ignoring any local .env file."""
    return Settings(_env_file=None, **overrides)  # type: ignore[call-arg]


class InMemoryJobRepository:
    """Mirrors JobRepository on dicts, guarded by one lock."""

    def __init__(self) -> None:
        self.jobs: dict[str, JobRecord] = {}
        self.results: dict[str, ResultRecord] = {}
        self._lock = threading.Lock()

    def add(self, job: JobRecord) -> JobRecord:
        """Seed a job directly (tests only)."""
        with self._lock:
            self.jobs[job.id] = replace(job, created_at=job.created_at or _now())
        return self.jobs[job.id]

    def age(self, job_id: str, seconds: int) -> None:
        """Move a job's created_at into the past (tests only)."""
        with self._lock:
            job = self.jobs[job_id]
            self.jobs[job_id] = replace(job, created_at=_now() - timedelta(seconds=seconds))

    def insert_pending(self, job_id: str, owner_id: str, storage_key: str, content_hash: str) -> None:
        self.add(
            JobRecord(
                id=job_id,
                owner_id=owner_id,
                storage_key=storage_key,
                content_hash=content_hash,
                status=JobStatus.PENDING_CLAIM,
            )
        )

    def insert_completed_from_cache(
        self,
        job_id: str,
        owner_id: str,
        storage_key: str,
        content_hash: str,
        content: dict[str, Any],
    ) -> None:
        self.add(
            JobRecord(
                id=job_id,
                owner_id=owner_id,
                storage_key=storage_key,
                content_hash=content_hash,
                status=JobStatus.COMPLETED,
                parsed_content=content,
                completed_at=_now(),
            )
        )
        with self._lock:
            self.results[owner_id] = ResultRecord(owner_id=owner_id, job_id=job_id, content=content)

    def _transition(self, job_id: str, precondition, **changes: Any) -> bool:  # type: ignore[no-untyped-def]
        with self._lock:
            job = self.jobs.get(job_id)
            if job is None or not precondition(job):
                return False
            self.jobs[job_id] = replace(job, updated_at=_now(), **changes)
            return True

    def mark_queued(self, job_id: str) -> bool:
        job = self.jobs.get(job_id)
        return self._transition(
            job_id,
            lambda j: j.status == JobStatus.PENDING_CLAIM,
            status=JobStatus.QUEUED,
            queued_at=_now(),
            total_attempts=(job.total_attempts + 1) if job else 0,
        )

    def mark_claim_failed(self, job_id: str, error: AttemptError) -> bool:
        return self._transition(
            job_id,
            lambda j: j.status == JobStatus.PENDING_CLAIM,
            status=JobStatus.FAILED,
            error_message=error.message,
            last_attempt_error=error,
        )

    def mark_completed(
        self, job_id: str, attempt_number: int, owner_id: str, content: dict[str, Any]
    ) -> bool:
        written = self._transition(
            job_id,
            lambda j: j.status == JobStatus.QUEUED and j.total_attempts == attempt_number,
            status=JobStatus.COMPLETED,
            parsed_content=content,
            error_message=None,
            last_attempt_error=None,
            completed_at=_now(),
        )
        if written:
            with self._lock:
                self.results[owner_id] = ResultRecord(owner_id=owner_id, job_id=job_id, content=content)
        return written

    def mark_failed(self, job_id: str, attempt_number: int, error: AttemptError) -> bool:
        return self._transition(
            job_id,
            lambda j: j.status == JobStatus.QUEUED and j.total_attempts == attempt_number,
            status=JobStatus.FAILED,
            error_message=error.message,
            last_attempt_error=error,
        )

    def requeue(
        self,
        job_id: str,
        expected_total_attempts: int,
        expected_retry_count: int,
        manual: bool,
        enqueue: Callable[[Any], None] | None = None,
    ) -> bool:
        """Holds the lock across enqueue, like the row lock of the UPDATE."""
        with self._lock:
            job = self.jobs.get(job_id)
            if (
                job is None
                or job.status != JobStatus.FAILED
                or job.total_attempts != expected_total_attempts
                or job.retry_count != expected_retry_count
            ):
                return False
            if enqueue is not None:
                enqueue(None)
            self.jobs[job_id] = replace(
                job,
                status=JobStatus.QUEUED,
                queued_at=_now(),
                error_message=None,
                total_attempts=expected_total_attempts + 1,
                retry_count=expected_retry_count + (1 if manual else 0),
                updated_at=_now(),
            )
            return True

    def set_content_hash(self, job_id: str, content_hash: str) -> None:
        self._transition(job_id, lambda j: j.content_hash is None, content_hash=content_hash)

    def mark_superseded(self, job_id: str) -> bool:
        return self._transition(
            job_id,
            lambda j: j.status == JobStatus.COMPLETED and j.superseded_at is None,
            superseded_at=_now(),
        )

    def find_by_id(self, job_id: str) -> JobRecord | None:
        with self._lock:
            return self.jobs.get(job_id)

    def find_latest_completed_by_hash(self, owner_id: str, content_hash: str) -> JobRecord | None:
        with self._lock:
            matches = [
                job
                for job in self.jobs.values()
                if job.owner_id == owner_id
                and job.content_hash == content_hash
                and job.status == JobStatus.COMPLETED
            ]
        if not matches:
            return None
        return max(matches, key=lambda job: job.completed_at or datetime.min.replace(tzinfo=timezone.utc))

    def find_orphans(self, grace_seconds: int, limit: int) -> list[JobRecord]:
        cutoff = _now() - timedelta(seconds=grace_seconds)
        with self._lock:
            orphans = [
                job
                for job in self.jobs.values()
                if job.status == JobStatus.PENDING_CLAIM
                and job.storage_key
                and job.content_hash
                and job.created_at is not None
                and job.created_at < cutoff
            ]
        return sorted(orphans, key=lambda job: job.created_at)[:limit]  # type: ignore[arg-type, return-value]

    def mark_recovered(self, job_ids: list[str]) -> int:
        recovered = 0
        for job_id in job_ids:
            job = self.jobs.get(job_id)
            if job is None:
                continue
            if self._transition(
                job_id,
                lambda j: j.status == JobStatus.PENDING_CLAIM,
                status=JobStatus.QUEUED,
                queued_at=_now(),
                total_attempts=job.total_attempts + 1,
            ):
                recovered += 1
        return recovered


@dataclass
class _Entry:
    id: int
    message: ParseMessage
    delivery_count: int = 0
    visible: bool = True


class InMemoryQueue(BaseQueue):
    """At-least-once queue; set available=False to make every call fail."""

    def __init__(self) -> None:
        self.available = True
        self.published: list[ParseMessage] = []
        self._entries: list[_Entry] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def _check(self) -> None:
        if not self.available:
            raise QueueUnavailableError("queue is down")

    def publish(self, message: ParseMessage, conn: Any = None) -> None:
        self._check()
        with self._lock:
            self._entries.append(_Entry(id=self._next_id, message=message))
            self._next_id += 1
            self.published.append(message)

    def receive(self, worker_id: str) -> Delivery | None:
        self._check()
        with self._lock:
            for entry in self._entries:
                if entry.visible:
                    entry.visible = False
                    entry.delivery_count += 1
                    return Delivery(id=entry.id, message=entry.message, delivery_count=entry.delivery_count)
        return None

    def ack(self, delivery: Delivery) -> None:
        with self._lock:
            self._entries = [entry for entry in self._entries if entry.id != delivery.id]

    def nack(self, delivery: Delivery, delay_seconds: int = 0) -> None:
        """A delayed nack keeps the message hidden until expire_visibility()."""
        with self._lock:
            for entry in self._entries:
                if entry.id == delivery.id:
                    entry.visible = delay_seconds <= 0

    def expire_visibility(self) -> None:
        """Simulate the visibility timeout passing for every in-flight message."""
        with self._lock:
            for entry in self._entries:
                entry.visible = True

    def pending(self) -> list[ParseMessage]:
        with self._lock:
            return [entry.message for entry in self._entries]


class InMemoryStorage(BaseStorage):
    def __init__(self, objects: dict[str, bytes] | None = None) -> None:
        self.objects: dict[str, bytes] = dict(objects or {})
        self.available = True
        self.get_calls = 0

    def put(self, key: str, data: bytes, content_type: str = "application/pdf") -> None:
        if not self.available:
            raise StorageUnavailableError("storage is down")
        self.objects[key] = data

    def get(self, key: str) -> bytes:
        self.get_calls += 1
        if not self.available:
            raise StorageUnavailableError("storage is down")
        if key not in self.objects:
            raise ObjectNotFoundError(f"Object not found: {key}")
        return self.objects[key]

    def delete(self, key: str) -> None:
        self.objects.pop(key, None)


class RecordingCacheInvalidator:
    def __init__(self) -> None:
        self.invalidated: list[str] = []

    def invalidate(self, owner_id: str) -> None:
        self.invalidated.append(owner_id)
