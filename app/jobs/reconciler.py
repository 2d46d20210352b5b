from dataclasses import dataclass, field
from datetime import datetime, timezone

from app.config.settings import Settings
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.messaging.base import BaseQueue
from app.messaging.exceptions import QueueError
from app.messaging.models import ParseMessage


@dataclass(frozen=True)
class ReconcileResult:
    found: int
    recovered: int
    skipped: int
    failed: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class OrphanReconciler:
    """Re-publishes jobs stuck in pending_claim.

    A claim that crashed between publishing and its status write leaves the
    job in pending_claim. After a grace period each such job gets one message
    per run and all published jobs are advanced to queued in one statement.
    """

    def __init__(self, job_repo: JobRepository, queue: BaseQueue, settings: Settings) -> None:
        self._job_repo = job_repo
        self._queue = queue
        self._settings = settings

    def run_once(self) -> ReconcileResult:
        candidates = self._job_repo.find_orphans(
            grace_seconds=self._settings.reconcile_grace_seconds,
            limit=self._settings.reconcile_batch_size,
        )
        if not candidates:
            Log.debug("Reconciler: no orphaned jobs")
            return ReconcileResult(found=0, recovered=0, skipped=0, failed=0)

        published: list[str] = []
        skipped = 0
        failed = 0
        for job in candidates:
            if job.total_attempts >= self._settings.total_max_attempts:
                Log.warning(
                    f"Reconciler: job {job.id} has used {job.total_attempts} attempts, skipping"
                )
                skipped += 1
                continue
            message = ParseMessage(
                job_id=job.id,
                owner_id=job.owner_id,
                storage_key=job.storage_key,
                content_hash=job.content_hash or "",
                attempt_number=job.total_attempts + 1,
            )
            try:
                self._queue.publish(message)
            except QueueError as exc:
                Log.error(f"Reconciler: failed to publish job {job.id}: {exc}")
                failed += 1
                continue
            published.append(job.id)

        recovered = self._job_repo.mark_recovered(published)
        if recovered < len(published):
            Log.warning(
                f"Reconciler: {len(published) - recovered} published job(s) left pending_claim "
                "before the status update"
            )

        result = ReconcileResult(
            found=len(candidates),
            recovered=recovered,
            skipped=skipped,
            failed=failed,
        )
        Log.info(
            f"Reconciler: found={result.found} recovered={result.recovered} "
            f"skipped={result.skipped} failed={result.failed}"
        )
        return result
