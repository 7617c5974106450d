"""Structured logging setup for the email archive."""

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog


class LoggerSetup:
    """Initialize and configure structlog for the archive pipeline."""

    def __init__(self, log_dir: Optional[Path] = None, level: int = logging.INFO):
        """
        Initialize logger setup.

        Args:
            log_dir: Optional directory for an ``archive.log`` file. When omitted,
                events are only written to stderr.
            level: Minimum stdlib logging level for archive loggers
        """
        self.log_dir = log_dir
        self.level = level
        self._configured = False

    def setup(self) -> None:
        """Configure structlog with JSON rendering on top of stdlib logging."""
        if self._configured:
            return

        root = logging.getLogger("mailarchive")
        root.setLevel(self.level)

        if not root.handlers:
            stream = logging.StreamHandler(sys.stderr)
            stream.setFormatter(logging.Formatter("%(message)s"))
            root.addHandler(stream)

        if self.log_dir is not None:
            self.add_file_handler(self.log_dir)

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.JSONRenderer(),
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        self._configured = True

    def add_file_handler(self, log_dir: Path) -> None:
        """Also write archive events to ``<log_dir>/archive.log``."""
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_dir / "archive.log", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger("mailarchive").addHandler(handler)
        self.log_dir = log_dir

    def get_logger(self, name: str) -> structlog.stdlib.BoundLogger:
        """Get a named logger."""
        self.setup()
        return structlog.get_logger(name)


_logger_setup: Optional[LoggerSetup] = None


def initialize_logging(log_dir: Optional[Path] = None, level: int = logging.INFO) -> LoggerSetup:
    """Initialize logging (call once at startup)."""
    global _logger_setup
    if _logger_setup is None:
        _logger_setup = LoggerSetup(log_dir, level)
        _logger_setup.setup()
    elif log_dir is not None and _logger_setup.log_dir is None:
        _logger_setup.add_file_handler(log_dir)
    return _logger_setup


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a logger, initializing logging with defaults if needed.

    Logger names should live under the ``mailarchive`` namespace so the
    handlers installed by :class:`LoggerSetup` apply to them.
    """
    if _logger_setup is None:
        initialize_logging()
    return _logger_setup.get_logger(name)
