class StorageError(Exception):
    """Base exception for all object storage errors."""


class ObjectNotFoundError(StorageError):
    """Raised when no object exists under the requested key."""


class StorageUnavailableError(StorageError):
    """Raised when the storage backend cannot be reached or fails."""
