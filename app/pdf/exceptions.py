class PdfExtractionError(Exception):
    """Raised when text cannot be extracted from a PDF document."""


class InvalidPdfError(PdfExtractionError):
    """Raised when the bytes are not a readable PDF (bad header, encrypted, too large)."""


class PdfTooLargeError(InvalidPdfError):
    """Raised when a PDF exceeds the configured size limit."""
