from collections.abc import Callable
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import get_connection
from app.database.models import AttemptError, JobRecord, JobStatus
from app.database.repositories.result_repository import ResultRepository

_JOB_COLUMNS = """
    id, owner_id, storage_key, content_hash, status, error_message,
    last_attempt_error, retry_count, total_attempts, parsed_content,
    superseded_at, queued_at, completed_at, created_at, updated_at
"""


class JobRepository:
    """Database operations for the resume_jobs table.

    Every status transition is a single statement guarded by a precondition
    on the current status (and attempt counters where they matter). Methods
    that transition return False when the precondition did not hold.
    """

    def __init__(self, result_repo: ResultRepository | None = None) -> None:
        self._result_repo = result_repo or ResultRepository()

    def insert_pending(
        self,
        job_id: str,
        owner_id: str,
        storage_key: str,
        content_hash: str,
    ) -> None:
        """Insert a new job in pending_claim with its content hash."""
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO resume_jobs (id, owner_id, storage_key, content_hash, status)
                VALUES (%s, %s, %s, %s, 'pending_claim')
                """,
                (job_id, owner_id, storage_key, content_hash),
            )
            conn.commit()

    def insert_completed_from_cache(
        self,
        job_id: str,
        owner_id: str,
        storage_key: str,
        content_hash: str,
        content: dict[str, Any],
    ) -> None:
        """Insert a job directly as completed and upsert the owner's result."""
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO resume_jobs (
                    id, owner_id, storage_key, content_hash, status,
                    parsed_content, completed_at
                )
                VALUES (%s, %s, %s, %s, 'completed', %s, NOW())
                """,
                (job_id, owner_id, storage_key, content_hash, Jsonb(content)),
            )
            self._result_repo.upsert(conn, owner_id, job_id, content)
            conn.commit()

    def mark_queued(self, job_id: str) -> bool:
        """Advance a freshly published claim from pending_claim to queued."""
        with get_connection() as conn:
            cur = conn.execute(
                """
                UPDATE resume_jobs
                SET status = 'queued', queued_at = NOW(),
                    total_attempts = total_attempts + 1, updated_at = NOW()
                WHERE id = %s AND status = 'pending_claim'
                """,
                (job_id,),
            )
            conn.commit()
            return cur.rowcount == 1

    def mark_claim_failed(self, job_id: str, error: AttemptError) -> bool:
        """Fail a pending_claim job whose message could not be published."""
        with get_connection() as conn:
            cur = conn.execute(
                """
                UPDATE resume_jobs
                SET status = 'failed', error_message = %s,
                    last_attempt_error = %s, updated_at = NOW()
                WHERE id = %s AND status = 'pending_claim'
                """,
                (error.message, Jsonb(error.to_dict()), job_id),
            )
            conn.commit()
            return cur.rowcount == 1

    def mark_completed(
        self,
        job_id: str,
        attempt_number: int,
        owner_id: str,
        content: dict[str, Any],
    ) -> bool:
        """Complete the attempt and upsert the owner's result in one transaction."""
        with get_connection() as conn:
            cur = conn.execute(
                """
                UPDATE resume_jobs
                SET status = 'completed', parsed_content = %s,
                    error_message = NULL, last_attempt_error = NULL,
                    completed_at = NOW(), updated_at = NOW()
                WHERE id = %s AND status = 'queued' AND total_attempts = %s
                """,
                (Jsonb(content), job_id, attempt_number),
            )
            if cur.rowcount != 1:
                conn.rollback()
                return False
            self._result_repo.upsert(conn, owner_id, job_id, content)
            conn.commit()
            return True

    def mark_failed(self, job_id: str, attempt_number: int, error: AttemptError) -> bool:
        """Fail the attempt if it is still the current one."""
        with get_connection() as conn:
            cur = conn.execute(
                """
                UPDATE resume_jobs
                SET status = 'failed', error_message = %s,
                    last_attempt_error = %s, updated_at = NOW()
                WHERE id = %s AND status = 'queued' AND total_attempts = %s
                """,
                (error.message, Jsonb(error.to_dict()), job_id, attempt_number),
            )
            conn.commit()
            return cur.rowcount == 1

    def requeue(
        self,
        job_id: str,
        expected_total_attempts: int,
        expected_retry_count: int,
        manual: bool,
        enqueue: Callable[[psycopg.Connection[Any]], None] | None = None,
    ) -> bool:
        """Move a failed job back to queued, counting one more attempt.

        enqueue runs inside the same transaction once the precondition held,
        while the row is still locked. If it raises, the transition is rolled
        back and the error propagates. A concurrent requeue that lost the race
        never calls it.
        """
        with get_connection() as conn:
            cur = conn.execute(
                """
                UPDATE resume_jobs
                SET status = 'queued', queued_at = NOW(), error_message = NULL,
                    total_attempts = total_attempts + 1,
                    retry_count = retry_count + %s,
                    updated_at = NOW()
                WHERE id = %s AND status = 'failed'
                  AND total_attempts = %s AND retry_count = %s
                """,
                (
                    1 if manual else 0,
                    job_id,
                    expected_total_attempts,
                    expected_retry_count,
                ),
            )
            if cur.rowcount != 1:
                conn.rollback()
                return False
            if enqueue is not None:
                try:
                    enqueue(conn)
                except Exception:
                    conn.rollback()
                    raise
            conn.commit()
            return True

    def set_content_hash(self, job_id: str, content_hash: str) -> None:
        """Backfill the content hash of a legacy row. Never overwrites."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE resume_jobs
                SET content_hash = %s, updated_at = NOW()
                WHERE id = %s AND content_hash IS NULL
                """,
                (content_hash, job_id),
            )
            conn.commit()

    def mark_superseded(self, job_id: str) -> bool:
        """Flag a completed job's cached result as stale."""
        with get_connection() as conn:
            cur = conn.execute(
                """
                UPDATE resume_jobs
                SET superseded_at = NOW(), updated_at = NOW()
                WHERE id = %s AND status = 'completed' AND superseded_at IS NULL
                """,
                (job_id,),
            )
            conn.commit()
            return cur.rowcount == 1

    def find_by_id(self, job_id: str) -> JobRecord | None:
        """Find a job by ID."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_JOB_COLUMNS} FROM resume_jobs WHERE id = %s",
                    (job_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _row_to_job(row)

    def find_latest_completed_by_hash(
        self, owner_id: str, content_hash: str
    ) -> JobRecord | None:
        """Most recent completed job of the owner for the given digest."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_JOB_COLUMNS}
                    FROM resume_jobs
                    WHERE owner_id = %s
                      AND content_hash = %s
                      AND status = 'completed'
                    ORDER BY completed_at DESC NULLS LAST
                    LIMIT 1
                    """,
                    (owner_id, content_hash),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _row_to_job(row)

    def find_orphans(self, grace_seconds: int, limit: int) -> list[JobRecord]:
        """Oldest pending_claim jobs created before the grace window."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_JOB_COLUMNS}
                    FROM resume_jobs
                    WHERE status = 'pending_claim'
                      AND storage_key IS NOT NULL
                      AND content_hash IS NOT NULL
                      AND created_at < NOW() - %s * INTERVAL '1 second'
                    ORDER BY created_at
                    LIMIT %s
                    """,
                    (grace_seconds, limit),
                )
                rows = cur.fetchall()

        return [_row_to_job(row) for row in rows]

    def mark_recovered(self, job_ids: list[str]) -> int:
        """Advance re-published orphans to queued in one statement."""
        if not job_ids:
            return 0
        with get_connection() as conn:
            cur = conn.execute(
                """
                UPDATE resume_jobs
                SET status = 'queued', queued_at = NOW(),
                    total_attempts = total_attempts + 1, updated_at = NOW()
                WHERE id = ANY(%s::uuid[]) AND status = 'pending_claim'
                """,
                (job_ids,),
            )
            conn.commit()
            return cur.rowcount


def _row_to_job(row: dict[str, Any]) -> JobRecord:
    return JobRecord(
        id=str(row["id"]),
        owner_id=row["owner_id"],
        storage_key=row["storage_key"],
        status=JobStatus(row["status"]),
        content_hash=row["content_hash"],
        error_message=row["error_message"],
        last_attempt_error=AttemptError.from_raw(row["last_attempt_error"]),
        retry_count=row["retry_count"],
        total_attempts=row["total_attempts"],
        parsed_content=row["parsed_content"],
        superseded_at=row["superseded_at"],
        queued_at=row["queued_at"],
        completed_at=row["completed_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
