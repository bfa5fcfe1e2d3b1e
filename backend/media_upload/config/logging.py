import logging
import os
import sys
from typing import Optional


DEFAULT_LOG_FORMAT = "%(asctime)s [%(pathname)s:%(lineno)d] [%(levelname)s] %(message)s"
COMPACT_LOG_FORMAT = "[%(levelname)s] - %(message)s"

NOISY_LOGGERS = ["asyncio", "apscheduler", "httpx", "httpcore", "multipart", "python_multipart"]


def setup_logging(
    *,
    debug: bool = False,
    level: Optional[int] = None,
    compact_console: bool = False,
) -> logging.Logger:
    """
    Configure application-wide logging.

    Features:
    - Idempotent (safe to call multiple times without duplicating handlers)
    - Colored console output with shortened paths
    - Optional compact console output
    - Integrates uvicorn loggers to use unified format

    Args:
        debug: Use DEBUG as base level when no explicit level is given.
        level: Explicit base log level (overrides debug).
        compact_console: Use a minimal console format.

    Returns:
        logging.Logger: Root logger instance.
    """
    root_logger = logging.getLogger()
    if level is None:
        level = logging.DEBUG if debug else logging.INFO
    root_logger.setLevel(level)

    # Prevent duplicate handlers if called again
    if getattr(root_logger, "_media_upload_logging_configured", False):
        return root_logger

    fmt = COMPACT_LOG_FORMAT if compact_console else DEFAULT_LOG_FORMAT
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(_ColoredFormatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(console_handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    # Uvicorn integration (if running under uvicorn)
    for uv_logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        uv_logger = logging.getLogger(uv_logger_name)
        uv_logger.handlers = []
        uv_logger.propagate = True
        uv_logger.setLevel(level)

    root_logger._media_upload_logging_configured = True  # type: ignore[attr-defined]
    return root_logger


_PACKAGE_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# levelno -> ANSI color code
_LEVEL_COLORS = {
    logging.DEBUG: 36,
    logging.INFO: 32,
    logging.WARNING: 33,
    logging.ERROR: 31,
    logging.CRITICAL: 35,
}


def _short_path(pathname: str) -> str:
    """Path relative to the package root for our modules, to the cwd otherwise."""
    if pathname.startswith(_PACKAGE_ROOT + os.sep):
        return os.path.relpath(pathname, _PACKAGE_ROOT)
    try:
        return os.path.relpath(pathname)
    except ValueError:  # different drive on Windows
        return pathname


class _ColoredFormatter(logging.Formatter):
    """Console formatter: shortened source paths, level names colored on a TTY."""

    def __init__(self, fmt: str, datefmt: Optional[str] = None, use_color: Optional[bool] = None):
        super().__init__(fmt, datefmt=datefmt)
        self.use_color = sys.stdout.isatty() if use_color is None else use_color

    def format(self, record: logging.LogRecord) -> str:
        # Handlers share the record; decorate a copy.
        shown = logging.makeLogRecord(record.__dict__)
        shown.pathname = _short_path(record.pathname)
        code = _LEVEL_COLORS.get(record.levelno)
        if self.use_color and code:
            shown.levelname = f"\033[{code}m{record.levelname}\033[0m"
        return super().format(shown)


__all__ = ["setup_logging"]
