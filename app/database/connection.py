from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool

from app.config.settings import Settings

APPLICATION_NAME = "resume-parse-worker"

_pool: ConnectionPool | None = None


def build_conninfo(settings: Settings) -> str:
    """Connection string from DB_* settings, with values quoted as needed."""
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_database,
        user=settings.db_username,
        password=settings.db_password,
        application_name=APPLICATION_NAME,
    )


def init_pool(settings: Settings) -> None:
    """Open the global pool, sized for every worker thread plus the reconciler.

    Blocks until the first connection succeeds so a wrong DB_* setting fails
    at startup instead of on the first message.
    """
    global _pool  # noqa: PLW0603
    _pool = ConnectionPool(
        build_conninfo(settings),
        min_size=1,
        max_size=max(settings.db_pool_max_size, settings.worker_concurrency + 2),
        open=True,
    )
    _pool.wait(timeout=settings.db_connect_timeout_seconds)


def close_pool() -> None:
    """Close the global connection pool."""
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a connection from the pool. Caller manages commit/rollback."""
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn
