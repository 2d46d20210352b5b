from abc import ABC, abstractmethod
from typing import Any

import psycopg

from app.messaging.models import Delivery, ParseMessage


class BaseQueue(ABC):
    """Contract for an at-least-once message queue.

    A received delivery stays invisible to other consumers until it is acked,
    nacked, or its visibility timeout expires, after which it is delivered
    again.
    """

    @abstractmethod
    def publish(self, message: ParseMessage, conn: psycopg.Connection[Any] | None = None) -> None:
        """Durably enqueue a message.

        With conn, a queue stored in the same database writes the message in
        the caller's open transaction and leaves the commit to the caller.
        Other queues publish immediately.

        Raises:
            QueueUnavailableError: if the message could not be enqueued.
        """

    @abstractmethod
    def receive(self, worker_id: str) -> Delivery | None:
        """Take the next visible message, or None when the queue is empty."""

    @abstractmethod
    def ack(self, delivery: Delivery) -> None:
        """Remove a delivered message for good."""

    @abstractmethod
    def nack(self, delivery: Delivery, delay_seconds: int = 0) -> None:
        """Make a delivered message visible again after a delay."""
