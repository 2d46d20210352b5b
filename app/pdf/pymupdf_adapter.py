import pymupdf

from app.pdf.base import BasePdfExtractor, ensure_pdf
from app.pdf.exceptions import InvalidPdfError, PdfExtractionError


class PyMuPdfAdapter(BasePdfExtractor):
    """Extracts text from PDF using PyMuPDF."""

    def extract(self, pdf_bytes: bytes) -> str:
        ensure_pdf(pdf_bytes)
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                if doc.needs_pass:
                    raise InvalidPdfError("PDF is encrypted or password-protected")
                pages = [page.get_text() for page in doc]
        except InvalidPdfError:
            raise
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf extraction failed: {exc}") from exc
        return "\n".join(pages).strip()
