from pathlib import Path

from app.storage.base import BaseStorage
from app.storage.exceptions import ObjectNotFoundError, StorageError, StorageUnavailableError


class LocalFileStorage(BaseStorage):
    """Stores objects as files below a root directory: {root}/{key}."""

    def __init__(self, root: Path) -> None:
        self._root = root.resolve()

    def put(self, key: str, data: bytes, content_type: str = "application/pdf") -> None:
        path = self._resolve_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise StorageUnavailableError(f"Failed to write {key}: {exc}") from exc

    def get(self, key: str) -> bytes:
        path = self._resolve_path(key)
        if not path.is_file():
            raise ObjectNotFoundError(f"Object not found: {key}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageUnavailableError(f"Failed to read {key}: {exc}") from exc

    def delete(self, key: str) -> None:
        path = self._resolve_path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageUnavailableError(f"Failed to delete {key}: {exc}") from exc

    def _resolve_path(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if not path.is_relative_to(self._root) or path == self._root:
            raise StorageError(f"Invalid storage key: {key!r}")
        return path
