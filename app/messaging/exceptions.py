class QueueError(Exception):
    """Base exception for all message queue errors."""


class QueueUnavailableError(QueueError):
    """Raised when a message cannot be published or received."""
