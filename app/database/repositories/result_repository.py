from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import get_connection
from app.database.models import ResultRecord


class ResultRepository:
    """Database operations for the resume_results table."""

    def upsert(
        self,
        conn: psycopg.Connection[Any],
        owner_id: str,
        job_id: str,
        content: dict[str, Any],
    ) -> None:
        """Write the owner's result inside the caller's transaction."""
        conn.execute(
            """
            INSERT INTO resume_results (owner_id, job_id, content)
            VALUES (%s, %s, %s)
            ON CONFLICT (owner_id) DO UPDATE
            SET job_id = EXCLUDED.job_id,
                content = EXCLUDED.content,
                updated_at = NOW()
            """,
            (owner_id, job_id, Jsonb(content)),
        )

    def find_by_owner(self, owner_id: str) -> ResultRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT owner_id, job_id, content, created_at, updated_at
                    FROM resume_results
                    WHERE owner_id = %s
                    """,
                    (owner_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return ResultRecord(
            owner_id=row["owner_id"],
            job_id=str(row["job_id"]),
            content=row["content"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
