class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class EmptyDocumentError(ProcessorError):
    """Raised when a PDF yields no text (scanned image, blank pages)."""


class ContentMismatchError(ProcessorError):
    """Raised when stored bytes no longer hash to the job's content hash."""
