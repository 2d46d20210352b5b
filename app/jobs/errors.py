"""Failure classification for job attempts.

Every failed attempt is recorded as an AttemptError whose type decides retry
eligibility: transient types may be retried within the attempt budgets,
permanent types never are.
"""

import re
from enum import StrEnum

import psycopg

from app.database.models import AttemptError
from app.jobs.exceptions import AttemptTimeoutError, ServiceUnavailableError
from app.messaging.exceptions import QueueError
from app.parsing.exceptions import (
    MalformedResponseError,
    ParserNetworkError,
    ParserRequestRejectedError,
    ParserValidationError,
)
from app.pdf.exceptions import PdfExtractionError
from app.processor.exceptions import ContentMismatchError, EmptyDocumentError
from app.storage.exceptions import ObjectNotFoundError, StorageError

_MAX_MESSAGE_LENGTH = 500


class ErrorType(StrEnum):
    STORAGE_UNAVAILABLE = "storage_unavailable"
    QUEUE_UNAVAILABLE = "queue_unavailable"
    AI_SERVICE_UNAVAILABLE = "ai_service_unavailable"
    ATTEMPT_TIMEOUT = "attempt_timeout"
    DB_CONNECTION_ERROR = "db_connection_error"
    DELIVERY_EXHAUSTED = "delivery_exhausted"
    INVALID_PDF = "invalid_pdf"
    FILE_NOT_FOUND = "file_not_found"
    MALFORMED_RESPONSE = "malformed_response"
    PARSE_VALIDATION_ERROR = "parse_validation_error"
    CONTENT_MISMATCH = "content_mismatch"
    REQUEST_REJECTED = "request_rejected"
    UNKNOWN = "unknown"


PERMANENT_ERROR_TYPES = frozenset(
    {
        ErrorType.INVALID_PDF,
        ErrorType.FILE_NOT_FOUND,
        ErrorType.MALFORMED_RESPONSE,
        ErrorType.PARSE_VALIDATION_ERROR,
        ErrorType.CONTENT_MISMATCH,
        ErrorType.REQUEST_REJECTED,
    }
)

# Checked in order; the first matching class wins.
_EXCEPTION_TYPES: tuple[tuple[type[BaseException], ErrorType], ...] = (
    (AttemptTimeoutError, ErrorType.ATTEMPT_TIMEOUT),
    (ObjectNotFoundError, ErrorType.FILE_NOT_FOUND),
    (StorageError, ErrorType.STORAGE_UNAVAILABLE),
    (QueueError, ErrorType.QUEUE_UNAVAILABLE),
    (ServiceUnavailableError, ErrorType.STORAGE_UNAVAILABLE),
    (PdfExtractionError, ErrorType.INVALID_PDF),
    (EmptyDocumentError, ErrorType.INVALID_PDF),
    (ContentMismatchError, ErrorType.CONTENT_MISMATCH),
    (ParserNetworkError, ErrorType.AI_SERVICE_UNAVAILABLE),
    (MalformedResponseError, ErrorType.MALFORMED_RESPONSE),
    (ParserValidationError, ErrorType.PARSE_VALIDATION_ERROR),
    (ParserRequestRejectedError, ErrorType.REQUEST_REJECTED),
    (psycopg.OperationalError, ErrorType.DB_CONNECTION_ERROR),
    (TimeoutError, ErrorType.ATTEMPT_TIMEOUT),
    (ConnectionError, ErrorType.AI_SERVICE_UNAVAILABLE),
)

# Fallback for exceptions without a known class, matched against the message.
_MESSAGE_PATTERNS: tuple[tuple[re.Pattern[str], ErrorType], ...] = (
    (re.compile(r"database.*(connection|unavailable)|connection.*(pool|database)", re.I), ErrorType.DB_CONNECTION_ERROR),
    (re.compile(r"timed? ?out|timeout|deadline exceeded", re.I), ErrorType.ATTEMPT_TIMEOUT),
    (re.compile(r"rate.?limit|too many requests|\b429\b|throttl", re.I), ErrorType.AI_SERVICE_UNAVAILABLE),
    (re.compile(r"connection (refused|reset|aborted)|network|\b50[234]\b|service unavailable", re.I), ErrorType.AI_SERVICE_UNAVAILABLE),
    (re.compile(r"invalid pdf|not a pdf|encrypted|password|no text", re.I), ErrorType.INVALID_PDF),
    (re.compile(r"invalid json|json.*(parse|decode)|unexpected token", re.I), ErrorType.MALFORMED_RESPONSE),
    (re.compile(r"(file|object|key) not found|no such key|\b404\b", re.I), ErrorType.FILE_NOT_FOUND),
    (re.compile(r"validation error|schema validation|required field", re.I), ErrorType.PARSE_VALIDATION_ERROR),
    (re.compile(r"context.length.exceeded|maximum context length|bad request|error code: 400\b", re.I), ErrorType.REQUEST_REJECTED),
)


def is_permanent_error_type(error_type: str | None) -> bool:
    return error_type in PERMANENT_ERROR_TYPES


def classify_error(exc: BaseException) -> AttemptError:
    """Map an attempt exception to a typed, user-presentable AttemptError."""
    message = _describe(exc)
    for exc_class, error_type in _EXCEPTION_TYPES:
        if isinstance(exc, exc_class):
            return AttemptError(type=error_type, message=message)
    for pattern, error_type in _MESSAGE_PATTERNS:
        if pattern.search(message):
            return AttemptError(type=error_type, message=message)
    return AttemptError(type=ErrorType.UNKNOWN, message=message)


def _describe(exc: BaseException) -> str:
    message = str(exc).strip() or type(exc).__name__
    if len(message) > _MAX_MESSAGE_LENGTH:
        message = f"{message[: _MAX_MESSAGE_LENGTH - 3]}..."
    return message
