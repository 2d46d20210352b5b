import threading
from collections.abc import Callable

from app.logging.logger import Log


class IntervalRunner:
    """Calls a function now and then every interval until stopped.

    An exception raised by one run is logged; the next run still happens.
    """

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        func: Callable[[], object],
        stop_event: threading.Event | None = None,
    ) -> None:
        self._name = name
        self._interval_seconds = interval_seconds
        self._func = func
        self._stop_event = stop_event or threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._loop, name=self._name, daemon=True)
        self._thread.start()
        Log.info(f"{self._name} scheduled every {self._interval_seconds}s")

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)

    def run_once(self) -> None:
        try:
            self._func()
        except Exception as exc:
            Log.exception(f"{self._name} run failed: {exc}")

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            self.run_once()
            self._stop_event.wait(self._interval_seconds)
