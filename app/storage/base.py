from abc import ABC, abstractmethod


class BaseStorage(ABC):
    """Contract for object storage backends holding uploaded resumes."""

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str = "application/pdf") -> None:
        """Store bytes under the given key, replacing any existing object."""

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Return the bytes stored under key.

        Raises:
            ObjectNotFoundError: if nothing is stored under key.
            StorageUnavailableError: if the backend fails.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the object. Deleting a missing key is not an error."""
