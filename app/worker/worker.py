import os
import socket
import threading

from app.config.settings import Settings
from app.database.models import AttemptError, JobStatus
from app.database.repositories.job_repository import JobRepository
from app.jobs.errors import ErrorType
from app.logging.logger import Log
from app.messaging.base import BaseQueue
from app.messaging.models import Delivery
from app.worker.job_runner import JobRunner


def generate_worker_id(index: int | None = None) -> str:
    """Worker id as hostname:pid, with the pool index appended when given."""
    worker_id = f"{socket.gethostname()}:{os.getpid()}"
    return worker_id if index is None else f"{worker_id}:{index}"


class Worker:
    """Poll loop: receive -> check the job still wants this attempt -> run -> ack."""

    def __init__(
        self,
        queue: BaseQueue,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
        worker_id: str | None = None,
        stop_event: threading.Event | None = None,
    ) -> None:
        self._queue = queue
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._settings = settings
        self._worker_id = worker_id or generate_worker_id()
        self._stop_event = stop_event or threading.Event()

    @property
    def worker_id(self) -> str:
        return self._worker_id

    def stop(self) -> None:
        self._stop_event.set()

    def run(self, max_messages: int | None = None) -> None:
        """Main poll loop. Runs until stopped or interrupted.

        If max_messages is set, stop after handling that many messages (for testing).
        """
        Log.info(f"Worker {self._worker_id} started, polling for messages")
        handled = 0
        try:
            while not self._stop_event.is_set():
                if max_messages is not None and handled >= max_messages:
                    break
                delivery = self._try_receive()
                if delivery is None:
                    Log.debug("No messages available, sleeping")
                    self._stop_event.wait(self._settings.queue_poll_interval_seconds)
                    continue
                self._handle(delivery)
                handled += 1
        except KeyboardInterrupt:
            Log.info(f"Worker {self._worker_id} shutting down gracefully")
        Log.info(f"Worker {self._worker_id} stopped after {handled} message(s)")

    def _try_receive(self) -> Delivery | None:
        """Receive the next message. Gracefully handle queue errors."""
        try:
            return self._queue.receive(self._worker_id)
        except Exception as exc:
            Log.warning(f"Queue error, will retry: {exc}")
            return None

    def _handle(self, delivery: Delivery) -> None:
        message = delivery.message
        with Log.context(job=message.job_id, attempt=message.attempt_number):
            try:
                self._dispatch(delivery)
            except Exception as exc:
                Log.exception(
                    f"Message {delivery.id} for job {message.job_id} not acknowledged, "
                    f"left for redelivery: {exc}"
                )

    def _dispatch(self, delivery: Delivery) -> None:
        message = delivery.message
        if delivery.delivery_count > self._settings.queue_max_deliveries:
            self._dead_letter(delivery)
            return

        job = self._job_repo.find_by_id(message.job_id)
        if job is None:
            Log.warning(f"Job {message.job_id} not found, dropping message {delivery.id}")
            self._queue.ack(delivery)
            return

        if message.attempt_number > job.total_attempts:
            Log.info(
                f"Job {job.id} has not recorded attempt {message.attempt_number} yet "
                f"(status {job.status}), redelivering later"
            )
            self._queue.nack(delivery, self._settings.queue_nack_delay_seconds)
            return

        if job.status != JobStatus.QUEUED or job.total_attempts != message.attempt_number:
            Log.info(
                f"Stale message for job {job.id}: attempt {message.attempt_number}, "
                f"job is {job.status} at attempt {job.total_attempts}"
            )
            self._queue.ack(delivery)
            return

        self._job_runner.run(message)
        self._queue.ack(delivery)

    def _dead_letter(self, delivery: Delivery) -> None:
        message = delivery.message
        Log.error(
            f"Dead-lettering message {delivery.id} for job {message.job_id} "
            f"after {delivery.delivery_count} deliveries"
        )
        error = AttemptError(
            type=ErrorType.DELIVERY_EXHAUSTED,
            message=f"Processing did not finish after {delivery.delivery_count - 1} deliveries",
        )
        if self._job_repo.mark_failed(message.job_id, message.attempt_number, error):
            Log.error(f"Job {message.job_id} marked failed: {error.message}")
        self._queue.ack(delivery)
