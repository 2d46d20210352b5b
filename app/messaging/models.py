from dataclasses import dataclass
from typing import Any

MESSAGE_TYPE_PARSE = "parse"


@dataclass(frozen=True)
class ParseMessage:
    """Work item asking a worker to run one attempt of a job."""

    job_id: str
    owner_id: str
    storage_key: str
    content_hash: str
    attempt_number: int
    type: str = MESSAGE_TYPE_PARSE

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "job_id": self.job_id,
            "owner_id": self.owner_id,
            "storage_key": self.storage_key,
            "content_hash": self.content_hash,
            "attempt_number": self.attempt_number,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ParseMessage":
        """Build from a decoded payload.

        Raises:
            ValueError: if a field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Message payload must be an object, got {type(data).__name__}")
        for field in ("job_id", "owner_id", "storage_key", "content_hash"):
            if not isinstance(data.get(field), str) or not data[field]:
                raise ValueError(f"Message field '{field}' must be a non-empty string")
        attempt_number = data.get("attempt_number")
        if not isinstance(attempt_number, int) or isinstance(attempt_number, bool) or attempt_number < 1:
            raise ValueError("Message field 'attempt_number' must be a positive integer")
        message_type = data.get("type", MESSAGE_TYPE_PARSE)
        if message_type != MESSAGE_TYPE_PARSE:
            raise ValueError(f"Unsupported message type '{message_type}'")
        return cls(
            job_id=data["job_id"],
            owner_id=data["owner_id"],
            storage_key=data["storage_key"],
            content_hash=data["content_hash"],
            attempt_number=attempt_number,
        )


@dataclass(frozen=True)
class Delivery:
    """A received message together with its queue bookkeeping."""

    id: int
    message: ParseMessage
    delivery_count: int
