from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import get_connection
from app.logging.logger import Log
from app.messaging.base import BaseQueue
from app.messaging.exceptions import QueueUnavailableError
from app.messaging.models import Delivery, ParseMessage


class PostgresQueue(BaseQueue):
    """Queue on the resume_parse_queue table.

    Receiving claims the oldest visible row with SELECT FOR UPDATE SKIP LOCKED
    and pushes its visible_at forward by the visibility timeout, so a consumer
    that dies without acking lets the message reappear.
    """

    def __init__(self, visibility_timeout_seconds: int) -> None:
        self._visibility_timeout_seconds = visibility_timeout_seconds

    def publish(self, message: ParseMessage, conn: psycopg.Connection[Any] | None = None) -> None:
        try:
            if conn is not None:
                self._insert(conn, message)
            else:
                with get_connection() as own_conn:
                    self._insert(own_conn, message)
                    own_conn.commit()
        except psycopg.Error as exc:
            raise QueueUnavailableError(f"Failed to publish message for job {message.job_id}: {exc}") from exc
        Log.debug(f"Published attempt {message.attempt_number} for job {message.job_id}")

    @staticmethod
    def _insert(conn: psycopg.Connection[Any], message: ParseMessage) -> None:
        conn.execute(
            "INSERT INTO resume_parse_queue (payload) VALUES (%s)",
            (Jsonb(message.to_dict()),),
        )

    def receive(self, worker_id: str) -> Delivery | None:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        SELECT id, payload, delivery_count
                        FROM resume_parse_queue
                        WHERE visible_at <= NOW()
                        ORDER BY visible_at, id
                        LIMIT 1
                        FOR UPDATE SKIP LOCKED
                        """
                    )
                    row = cur.fetchone()

                if row is None:
                    conn.rollback()
                    return None

                try:
                    message = ParseMessage.from_dict(row["payload"])
                except ValueError as exc:
                    Log.error(f"Dropping malformed queue message {row['id']}: {exc}")
                    conn.execute("DELETE FROM resume_parse_queue WHERE id = %s", (row["id"],))
                    conn.commit()
                    return None

                conn.execute(
                    """
                    UPDATE resume_parse_queue
                    SET delivery_count = delivery_count + 1,
                        visible_at = NOW() + %s * INTERVAL '1 second',
                        locked_by = %s
                    WHERE id = %s
                    """,
                    (self._visibility_timeout_seconds, worker_id, row["id"]),
                )
                conn.commit()
        except psycopg.Error as exc:
            raise QueueUnavailableError(f"Failed to receive message: {exc}") from exc

        return Delivery(
            id=row["id"],
            message=message,
            delivery_count=row["delivery_count"] + 1,
        )

    def ack(self, delivery: Delivery) -> None:
        try:
            with get_connection() as conn:
                conn.execute("DELETE FROM resume_parse_queue WHERE id = %s", (delivery.id,))
                conn.commit()
        except psycopg.Error as exc:
            raise QueueUnavailableError(f"Failed to ack message {delivery.id}: {exc}") from exc

    def nack(self, delivery: Delivery, delay_seconds: int = 0) -> None:
        try:
            with get_connection() as conn:
                conn.execute(
                    """
                    UPDATE resume_parse_queue
                    SET visible_at = NOW() + %s * INTERVAL '1 second', locked_by = NULL
                    WHERE id = %s
                    """,
                    (delay_seconds, delivery.id),
                )
                conn.commit()
        except psycopg.Error as exc:
            raise QueueUnavailableError(f"Failed to nack message {delivery.id}: {exc}") from exc
