import threading
from collections.abc import Callable

from app.logging.logger import Log
from app.worker.worker import Worker, generate_worker_id


class WorkerPool:
    """Runs several workers, each in its own thread, sharing one stop event."""

    def __init__(
        self,
        worker_factory: Callable[[str, threading.Event], Worker],
        concurrency: int,
        stop_event: threading.Event | None = None,
    ) -> None:
        self._worker_factory = worker_factory
        self._concurrency = concurrency
        self._stop_event = stop_event or threading.Event()
        self._threads: list[threading.Thread] = []

    def start(self) -> None:
        for index in range(self._concurrency):
            worker_id = generate_worker_id(index)
            worker = self._worker_factory(worker_id, self._stop_event)
            thread = threading.Thread(target=worker.run, name=f"worker-{index}", daemon=True)
            thread.start()
            self._threads.append(thread)
        Log.info(f"Worker pool started with {self._concurrency} worker(s)")

    def stop(self) -> None:
        self._stop_event.set()

    def join(self, poll_seconds: float = 1.0) -> None:
        """Block until every worker thread has exited."""
        for thread in self._threads:
            while thread.is_alive():
                thread.join(poll_seconds)

    def is_alive(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)
