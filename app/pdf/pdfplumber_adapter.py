import io

import pdfplumber

from app.pdf.base import BasePdfExtractor, ensure_pdf
from app.pdf.exceptions import InvalidPdfError, PdfExtractionError


class PdfPlumberAdapter(BasePdfExtractor):
    """Extracts text from PDF using pdfplumber."""

    def extract(self, pdf_bytes: bytes) -> str:
        ensure_pdf(pdf_bytes)
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            if _is_password_error(exc):
                raise InvalidPdfError("PDF is encrypted or password-protected") from exc
            raise PdfExtractionError(f"pdfplumber extraction failed: {exc}") from exc
        return "\n".join(pages).strip()


def _is_password_error(exc: BaseException) -> bool:
    # pdfplumber wraps pdfminer errors, so inspect the whole cause chain
    current: BaseException | None = exc
    while current is not None:
        if "Password" in type(current).__name__ or "password" in str(current).lower():
            return True
        current = current.__cause__ or current.__context__
    return False
