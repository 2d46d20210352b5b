import os
import uuid
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool

_SCHEMA_PATH = Path(__file__).resolve().parents[2] / "app" / "database" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "resumes_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(_SCHEMA_PATH.read_text())
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture(autouse=True)
def integration_cleanup(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    yield
    if "integration_pool" not in request.fixturenames:
        return
    with get_connection() as conn:
        conn.execute("TRUNCATE resume_parse_queue, resume_results, resume_jobs")
        conn.commit()


@pytest.fixture
def new_job_id() -> Callable[[], str]:
    return lambda: str(uuid.uuid4())


@pytest.fixture
def backdate(db_conn: psycopg.Connection[Any]) -> Callable[[str, int], None]:
    """Move a job's created_at into the past by the given number of seconds."""

    def _backdate(job_id: str, seconds: int) -> None:
        db_conn.execute(
            "UPDATE resume_jobs SET created_at = NOW() - %s * INTERVAL '1 second' WHERE id = %s",
            (seconds, job_id),
        )
        db_conn.commit()

    return _backdate
