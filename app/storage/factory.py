from pathlib import Path

from app.config.settings import Settings
from app.storage.base import BaseStorage
from app.storage.local_adapter import LocalFileStorage
from app.storage.s3_adapter import S3Storage


class StorageFactory:
    """Creates the object storage backend based on settings."""

    BACKENDS = ("local", "s3")

    @classmethod
    def create(cls, settings: Settings) -> BaseStorage:
        backend = settings.storage_backend.lower()
        if backend == "local":
            return LocalFileStorage(Path(settings.storage_local_root))
        if backend == "s3":
            if not settings.storage_s3_bucket:
                raise ValueError("STORAGE_S3_BUCKET is required for the s3 storage backend")
            return S3Storage(
                bucket=settings.storage_s3_bucket,
                endpoint_url=settings.storage_s3_endpoint_url,
                region=settings.storage_s3_region,
                access_key_id=settings.storage_s3_access_key_id,
                secret_access_key=settings.storage_s3_secret_access_key,
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
