import threading

from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.database.repositories.job_repository import JobRepository
from app.jobs.dedup import DedupCache
from app.jobs.reconciler import OrphanReconciler
from app.jobs.retry_policy import RetryPolicy
from app.jobs.scheduler import IntervalRunner
from app.logging.logger import Log
from app.messaging.postgres_queue import PostgresQueue
from app.notifications.cache_invalidator import CacheInvalidator
from app.processor.processor import build_processor
from app.storage.factory import StorageFactory
from app.worker.job_runner import JobRunner
from app.worker.pool import WorkerPool
from app.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> run reconciler and workers."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    stop_event = threading.Event()
    cache_invalidator = CacheInvalidator.from_settings(settings)
    try:
        storage = StorageFactory.create(settings)
        queue = PostgresQueue(settings.queue_visibility_timeout_seconds)
        job_repo = JobRepository()
        retry_policy = RetryPolicy(job_repo, queue, storage, settings)
        processor = build_processor(settings, storage)
        job_runner = JobRunner(
            processor, job_repo, DedupCache(job_repo), retry_policy, cache_invalidator, settings
        )

        reconciler = OrphanReconciler(job_repo, queue, settings)
        scheduler = IntervalRunner(
            "orphan-reconciler",
            settings.reconcile_interval_seconds,
            reconciler.run_once,
            stop_event,
        )
        pool = WorkerPool(
            lambda worker_id, stop: Worker(queue, job_repo, job_runner, settings, worker_id, stop),
            settings.worker_concurrency,
            stop_event,
        )

        scheduler.start()
        pool.start()
        try:
            pool.join()
        except KeyboardInterrupt:
            Log.info("Shutdown requested, waiting for workers to finish")
            stop_event.set()
            pool.join()
    finally:
        stop_event.set()
        cache_invalidator.close()
        close_pool()


if __name__ == "__main__":
    main()
