from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from app.database.repositories.job_repository import JobRepository


class CacheOutcome(StrEnum):
    FOUND = "found"
    STALE = "stale"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class CacheLookup:
    outcome: CacheOutcome
    content: dict[str, Any] | None = None
    source_job_id: str | None = None

    @property
    def found(self) -> bool:
        return self.outcome is CacheOutcome.FOUND


class DedupCache:
    """Finds a prior completed result for the same bytes, scoped to one owner.

    Only the most recent completed job for the digest counts: if the owner
    has since replaced its content with corrected content, the lookup is
    stale and nothing is served.
    """

    def __init__(self, job_repo: JobRepository) -> None:
        self._job_repo = job_repo

    def lookup(self, owner_id: str, content_hash: str) -> CacheLookup:
        job = self._job_repo.find_latest_completed_by_hash(owner_id, content_hash)
        if job is None or job.parsed_content is None:
            return CacheLookup(outcome=CacheOutcome.NOT_FOUND)
        if job.superseded_at is not None:
            return CacheLookup(outcome=CacheOutcome.STALE, source_job_id=job.id)
        return CacheLookup(
            outcome=CacheOutcome.FOUND,
            content=job.parsed_content,
            source_job_id=job.id,
        )
