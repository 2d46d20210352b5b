import hashlib


def content_hash(data: bytes) -> str:
    """Lowercase hex SHA-256 of exactly these bytes."""
    return hashlib.sha256(data).hexdigest()
