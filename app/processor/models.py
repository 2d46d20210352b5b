from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ProcessorResult:
    """Outcome of one successful attempt, ready for the terminal write."""

    job_id: str
    attempt_number: int
    content: dict[str, Any] = field(default_factory=dict)
    extracted_chars: int = 0
    truncated: bool = False
    source_job_id: str | None = None
