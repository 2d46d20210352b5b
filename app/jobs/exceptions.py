from enum import StrEnum
from typing import Any


class RejectionReason(StrEnum):
    """Why a retry was refused."""

    BUDGET_EXCEEDED = "budget_exceeded"
    PERMANENT_ERROR = "permanent_error"
    STATE_CONFLICT = "state_conflict"


class JobError(Exception):
    """Base exception for job lifecycle operations."""


class ServiceUnavailableError(JobError):
    """Raised when storage, store or queue is unreachable. The caller may retry."""


class JobNotFoundError(JobError):
    """Raised when no job exists with the given id."""


class AttemptTimeoutError(JobError):
    """Raised when an attempt exceeds its wall-clock budget."""


class ClaimRejectedError(JobError):
    """Raised when an upload cannot be claimed (not a PDF, too large, missing)."""

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message


class RetryRejectedError(JobError):
    """Raised when a retry is not allowed; details carries the counters involved."""

    def __init__(
        self,
        reason: RejectionReason,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.details = details or {}
