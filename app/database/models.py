import json
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any


class JobStatus(StrEnum):
    """Lifecycle states of a resume job."""

    PENDING_CLAIM = "pending_claim"
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class AttemptError:
    """Type and message of the most recent failed attempt."""

    type: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "message": self.message}

    @classmethod
    def from_raw(cls, raw: Any) -> "AttemptError | None":
        """Build from a JSONB column value; tolerate legacy string payloads."""
        if raw is None:
            return None
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError:
                return None
        if not isinstance(raw, dict) or not raw.get("type"):
            return None
        return cls(type=str(raw["type"]), message=str(raw.get("message") or ""))


@dataclass
class JobRecord:
    """Represents a row from the resume_jobs table."""

    id: str
    owner_id: str
    storage_key: str
    status: str
    content_hash: str | None = None
    error_message: str | None = None
    last_attempt_error: AttemptError | None = None
    retry_count: int = 0
    total_attempts: int = 0
    parsed_content: dict[str, Any] | None = None
    superseded_at: datetime | None = None
    queued_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ResultRecord:
    """Represents a row from the resume_results table."""

    owner_id: str
    job_id: str
    content: dict[str, Any]
    created_at: datetime | None = None
    updated_at: datetime | None = None
