import httpx

from app.config.settings import Settings
from app.logging.logger import Log


class CacheInvalidator:
    """Tells the rendering layer to drop its cached copy of an owner's resume.

    Best-effort: failures are logged and never reach the caller, so a job's
    status is never affected by this call.
    """

    def __init__(
        self,
        url: str,
        token: str,
        timeout_seconds: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url
        self._token = token
        self._client = client or httpx.Client(timeout=timeout_seconds)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CacheInvalidator":
        return cls(
            url=settings.cache_invalidation_url,
            token=settings.cache_invalidation_token,
            timeout_seconds=settings.cache_invalidation_timeout_seconds,
        )

    def invalidate(self, owner_id: str) -> None:
        if not self._url or not self._token:
            Log.warning(f"Cache invalidation not configured, skipping owner {owner_id}")
            return
        try:
            response = self._client.post(
                self._url,
                json={"owner_id": owner_id},
                headers={"x-internal-auth": self._token},
            )
        except httpx.HTTPError as exc:
            Log.warning(f"Cache invalidation failed for owner {owner_id}: {exc}")
            return
        if response.is_error:
            Log.warning(
                f"Cache invalidation for owner {owner_id} returned HTTP {response.status_code}"
            )
            return
        Log.debug(f"Cache invalidated for owner {owner_id}")

    def close(self) -> None:
        self._client.close()
