import pytest

from app.pdf.base import ensure_pdf
from app.pdf.exceptions import InvalidPdfError, PdfTooLargeError


class TestEnsurePdf:
    def test_accepts_pdf_header(self) -> None:
        ensure_pdf(b"%PDF-1.7 body", max_bytes=100)

    def test_rejects_missing_header(self) -> None:
        with pytest.raises(InvalidPdfError, match="not a PDF") as exc_info:
            ensure_pdf(b"PK\x03\x04 zip archive")
        assert not isinstance(exc_info.value, PdfTooLargeError)

    def test_rejects_oversized_payload(self) -> None:
        with pytest.raises(PdfTooLargeError, match="exceeds limit of 10 bytes"):
            ensure_pdf(b"%PDF-1.7 long body", max_bytes=10)

    def test_payload_at_limit_is_accepted(self) -> None:
        data = b"%PDF-1.7"
        ensure_pdf(data, max_bytes=len(data))

    def test_header_checked_before_size(self) -> None:
        with pytest.raises(InvalidPdfError) as exc_info:
            ensure_pdf(b"x" * 50, max_bytes=10)
        assert not isinstance(exc_info.value, PdfTooLargeError)
