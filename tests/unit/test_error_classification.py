import psycopg
import pytest

from app.jobs.errors import (
    PERMANENT_ERROR_TYPES,
    ErrorType,
    classify_error,
    is_permanent_error_type,
)
from app.jobs.exceptions import AttemptTimeoutError
from app.messaging.exceptions import QueueUnavailableError
from app.parsing.exceptions import (
    MalformedResponseError,
    ParserError,
    ParserNetworkError,
    ParserRequestRejectedError,
    ParserValidationError,
)
from app.pdf.exceptions import InvalidPdfError, PdfExtractionError
from app.processor.exceptions import ContentMismatchError, EmptyDocumentError
from app.storage.exceptions import ObjectNotFoundError, StorageUnavailableError


class TestClassifyByExceptionClass:
    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (AttemptTimeoutError("too slow"), ErrorType.ATTEMPT_TIMEOUT),
            (ObjectNotFoundError("gone"), ErrorType.FILE_NOT_FOUND),
            (StorageUnavailableError("s3 down"), ErrorType.STORAGE_UNAVAILABLE),
            (QueueUnavailableError("queue down"), ErrorType.QUEUE_UNAVAILABLE),
            (InvalidPdfError("encrypted"), ErrorType.INVALID_PDF),
            (PdfExtractionError("broken"), ErrorType.INVALID_PDF),
            (EmptyDocumentError("no text"), ErrorType.INVALID_PDF),
            (ContentMismatchError("changed"), ErrorType.CONTENT_MISMATCH),
            (ParserNetworkError("reset"), ErrorType.AI_SERVICE_UNAVAILABLE),
            (MalformedResponseError("not json"), ErrorType.MALFORMED_RESPONSE),
            (ParserValidationError("missing field"), ErrorType.PARSE_VALIDATION_ERROR),
            (ParserRequestRejectedError("prompt too long"), ErrorType.REQUEST_REJECTED),
            (psycopg.OperationalError("server closed"), ErrorType.DB_CONNECTION_ERROR),
            (TimeoutError(), ErrorType.ATTEMPT_TIMEOUT),
            (ConnectionResetError(), ErrorType.AI_SERVICE_UNAVAILABLE),
        ],
    )
    def test_maps_known_exceptions(self, exc: Exception, expected: ErrorType) -> None:
        assert classify_error(exc).type == expected


class TestClassifyByMessage:
    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("Rate limit reached for requests", ErrorType.AI_SERVICE_UNAVAILABLE),
            ("upstream returned 503", ErrorType.AI_SERVICE_UNAVAILABLE),
            ("request timed out", ErrorType.ATTEMPT_TIMEOUT),
            ("database connection lost", ErrorType.DB_CONNECTION_ERROR),
            ("Invalid JSON at position 3", ErrorType.MALFORMED_RESPONSE),
            ("file not found in bucket", ErrorType.FILE_NOT_FOUND),
            ("document is encrypted", ErrorType.INVALID_PDF),
            ("This model's maximum context length is 128000 tokens", ErrorType.REQUEST_REJECTED),
            ("Error code: 400 - context_length_exceeded", ErrorType.REQUEST_REJECTED),
        ],
    )
    def test_falls_back_to_message_patterns(self, message: str, expected: ErrorType) -> None:
        assert classify_error(RuntimeError(message)).type == expected

    def test_unrecognized_is_unknown(self) -> None:
        assert classify_error(RuntimeError("something odd")).type == ErrorType.UNKNOWN

    def test_plain_parser_error_stays_retryable(self) -> None:
        assert classify_error(ParserError("provider hiccup")).type == ErrorType.UNKNOWN


class TestErrorMessage:
    def test_uses_exception_text(self) -> None:
        assert classify_error(ValueError("bad value")).message == "bad value"

    def test_empty_text_uses_class_name(self) -> None:
        assert classify_error(KeyError()).message == "KeyError"

    def test_long_messages_are_capped(self) -> None:
        message = classify_error(RuntimeError("x" * 2000)).message
        assert len(message) == 500
        assert message.endswith("...")


class TestPermanence:
    def test_permanent_types(self) -> None:
        assert PERMANENT_ERROR_TYPES == {
            "invalid_pdf",
            "file_not_found",
            "malformed_response",
            "parse_validation_error",
            "content_mismatch",
            "request_rejected",
        }

    @pytest.mark.parametrize(
        "error_type",
        ["storage_unavailable", "ai_service_unavailable", "attempt_timeout", "unknown", None],
    )
    def test_transient_and_unknown_are_retryable(self, error_type: str | None) -> None:
        assert is_permanent_error_type(error_type) is False

    def test_plain_string_matches_enum(self) -> None:
        assert is_permanent_error_type("invalid_pdf") is True

    def test_rejected_request_is_permanent(self) -> None:
        error = classify_error(ParserRequestRejectedError("AI provider rejected the request: bad schema"))
        assert is_permanent_error_type(error.type) is True
