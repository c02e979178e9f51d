"""Logging setup shared by every dorexport module.

Modules create their logger with ``logger = setup_logger(__name__)``. Handlers
are attached once to the ``dorexport`` parent logger, so child loggers only
propagate.
"""

import logging
import logging.handlers
import sys
from threading import Lock

from dorexport.config import env

ROOT_LOGGER_NAME = "dorexport"
LOG_FILE_NAME = "dorexport.log"

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configure_lock = Lock()
_configured = False


class ExportLogger(logging.Logger):
    """Logger with traceback helpers."""

    def error_trace(self, msg, *args, **kwargs):
        """Log an error together with the active exception's traceback."""
        kwargs.setdefault("exc_info", True)
        self.error(msg, *args, **kwargs)

    def debug_trace(self, msg, *args, **kwargs):
        kwargs.setdefault("exc_info", True)
        self.debug(msg, *args, **kwargs)


def _resolve_level() -> int:
    if env.DEBUG:
        return logging.DEBUG
    return getattr(logging, env.LOG_LEVEL.upper(), logging.INFO)


def _configure_root() -> None:
    global _configured
    with _configure_lock:
        if _configured:
            return

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(_resolve_level())
        formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

        if env.ENABLE_LOGGING:
            try:
                env.LOG_DIR.mkdir(parents=True, exist_ok=True)
                file_handler = logging.handlers.RotatingFileHandler(
                    env.LOG_DIR / LOG_FILE_NAME,
                    maxBytes=10 * 1024 * 1024,
                    backupCount=5,
                )
                file_handler.setFormatter(formatter)
                root.addHandler(file_handler)
            except OSError as e:
                root.warning("File logging disabled, cannot write to %s: %s", env.LOG_DIR, e)

        _configured = True


def setup_logger(name: str) -> ExportLogger:
    """Return the logger for ``name``, configuring dorexport handlers on first use."""
    _configure_root()

    previous_class = logging.getLoggerClass()
    logging.setLoggerClass(ExportLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(previous_class)

    if not isinstance(logger, ExportLogger):
        logger.warning("Logger %s was created before setup_logger, trace helpers unavailable", name)
    return logger
