import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_context: ContextVar[dict[str, object]] = ContextVar("log_context", default={})


class _ContextFilter(logging.Filter):
    """Renders the active Log.context() fields as a 'key=value ' prefix."""

    def filter(self, record: logging.LogRecord) -> bool:
        fields = _context.get()
        record.context = "".join(f"{key}={value} " for key, value in fields.items())
        return True


class Log:
    """Centralized logging with structured format.

    Fields bound with Log.context() are prefixed to every line logged in the
    same thread (or in a context copied from it), e.g. job=... attempt=...
    """

    _logger: logging.Logger = logging.getLogger("resume_worker")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the logger with the specified level and stdout handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.addFilter(_ContextFilter())
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s [%(levelname)s] %(threadName)s %(context)s%(message)s"
                )
            )
            cls._logger.addHandler(handler)

    @classmethod
    @contextmanager
    def context(cls, **fields: object) -> Iterator[None]:
        """Bind fields to every log line emitted inside the block."""
        token = _context.set({**_context.get(), **fields})
        try:
            yield
        finally:
            _context.reset(token)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log an error message with the active exception's traceback."""
        cls._logger.exception(message, extra=kwargs)
