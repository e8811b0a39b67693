"""
Logging setup with contextvars-based metadata injection.

- Adds run_tag, tree id and the current node code into log lines (via contextvars).
- Supports console-only logging OR console + rotating file logs.
- Tunes noisy third-party library loggers (httpx, httpcore).
"""

import contextvars
import hashlib
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Context variables for dynamic log metadata
cv_run_tag = contextvars.ContextVar("run_tag", default="-")
cv_node_code = contextvars.ContextVar("node_code", default="-")
cv_tree_id = contextvars.ContextVar("tree_id", default="-")


def make_run_tag(run_id_full: str, length: int = 8) -> str:
    """
    Stable short tag derived from the full run_id.
    Uses BLAKE2s for collision resistance.
    """
    h = hashlib.blake2s(run_id_full.encode("utf-8"), digest_size=8).hexdigest()
    return h[:length]


class ContextInjectFilter(logging.Filter):
    """Inject context variables into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run = cv_run_tag.get() or "-"
        record.node = cv_node_code.get() or "-"
        record.tree = cv_tree_id.get() or "-"
        return True


def set_log_context(
    *,
    run_id_full: str | None = None,
    node_code: str | None = None,
    tree_id: int | None = None,
) -> None:
    """Update logging context.

    Each asyncio task works on a copy of the context, so a node code set inside a
    per-node task does not leak into sibling tasks.
    """
    if run_id_full is not None:
        cv_run_tag.set(make_run_tag(str(run_id_full)))

    if node_code is not None:
        cv_node_code.set(str(node_code))

    if tree_id is not None:
        cv_tree_id.set(str(tree_id))


CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] r=%(run)s n=%(node)s | %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s | r=%(run)s t=%(tree)s n=%(node)s | %(message)s"

# HTTP stack and event loop chatter
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def _attach(root: logging.Logger, handler: logging.Handler, level: int, formatter: logging.Formatter) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(ContextInjectFilter())
    root.addHandler(handler)


def configure_logging(
    *,
    log_file: Path | None = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 10_000_000,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Configure the root logger for an import run.

    Calling it again replaces the previous handlers.

    Args:
        log_file: Rotating run log (run.log in the run folder); console only when None
        console_level: Minimum level for console output (default: INFO)
        file_level: Minimum level for file output (default: DEBUG)
        max_bytes: Max log file size before rotation
        backup_count: Number of rotated files to keep
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)  # handlers enforce levels

    _attach(root, logging.StreamHandler(), console_level, logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _attach(
            root,
            RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"),
            file_level,
            logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"),
        )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured (console_level=%s, file=%s)",
        logging.getLevelName(console_level),
        log_file if log_file is not None else "None",
    )
