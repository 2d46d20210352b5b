from abc import ABC, abstractmethod

from app.pdf.exceptions import InvalidPdfError, PdfTooLargeError

PDF_MAGIC = b"%PDF-"


def ensure_pdf(pdf_bytes: bytes, max_bytes: int | None = None) -> None:
    """Reject bytes that do not start with the PDF header or exceed max_bytes.

    Raises:
        InvalidPdfError: on a bad header.
        PdfTooLargeError: on a payload larger than max_bytes.
    """
    if not pdf_bytes.startswith(PDF_MAGIC):
        raise InvalidPdfError("File is not a PDF (missing %PDF- header)")
    if max_bytes is not None and len(pdf_bytes) > max_bytes:
        raise PdfTooLargeError(
            f"File too large: {len(pdf_bytes)} bytes exceeds limit of {max_bytes} bytes"
        )


class BasePdfExtractor(ABC):
    """Contract for all PDF text extraction adapters."""

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> str:
        """Extract plain text from PDF bytes, pages joined by newlines.

        Raises:
            InvalidPdfError: if the document is encrypted or not a PDF.
            PdfExtractionError: if extraction fails for any other reason.
        """
