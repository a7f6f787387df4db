"""Logging for the digest, tagged with the run correlation id.

Every component (data source, summarizer, communicator, orchestrator, HTTP
server) gets its logger from here, so one digest run can be followed through
the logs by its run id.
"""

from __future__ import annotations

import contextlib
import contextvars
import logging
import os
import sys
import uuid
from pathlib import Path
from typing import Iterator, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(correlation_id)s] %(message)s"

# client libraries that log every HTTP round trip at INFO
_NOISY_LOGGERS = ("google.auth", "google.cloud", "google_genai", "httpx", "urllib3")

_run_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "gcp_release_digest_run_id",
    default=None,
)

_configured = False


class _RunIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = _run_id_var.get() or "-"
        return True


def _env_flag(key: str, default: str = "") -> bool:
    return os.getenv(key, default).strip().lower() in {"1", "true", "yes", "on"}


def _level_from_env() -> int:
    name = os.getenv("DIGEST_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _attach(root: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(_RunIdFilter())
    root.addHandler(handler)


def _log_file_path() -> Path:
    log_dir = Path(os.getenv("DIGEST_LOG_DIR", "logs")).expanduser().resolve()
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"{Path(sys.argv[0]).stem or 'gcp_release_digest'}.log"


def configure_logging(*, level: Optional[int] = None) -> None:
    """Install the stdout handler, and the file handler if
    ``DIGEST_LOG_TO_FILE`` is set. Only the first call has an effect.
    """
    global _configured
    if _configured:
        return

    level = _level_from_env() if level is None else level
    root = logging.getLogger()
    root.setLevel(level)

    _attach(root, logging.StreamHandler(sys.stdout), level)
    if _env_flag("DIGEST_LOG_TO_FILE"):
        mode = "a" if _env_flag("DIGEST_LOG_APPEND", "1") else "w"
        _attach(root, logging.FileHandler(_log_file_path(), mode=mode, encoding="utf-8"), level)

    if level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)


def new_correlation_id() -> str:
    return uuid.uuid4().hex[:12]


def get_correlation_id() -> Optional[str]:
    return _run_id_var.get()


@contextlib.contextmanager
def bind_correlation_id(correlation_id: Optional[str]) -> Iterator[None]:
    """Tag log records emitted in this context with ``correlation_id``.

    Pool threads start with an empty context; submit work through
    ``contextvars.copy_context().run`` to keep the id.
    """
    token = _run_id_var.set(correlation_id)
    try:
        yield
    finally:
        _run_id_var.reset(token)
