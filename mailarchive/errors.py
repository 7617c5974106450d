"""Exception hierarchy for the email archive."""

from pathlib import Path
from typing import Optional


class ArchiveError(Exception):
    """Base exception for email archive errors."""

    pass


class ArchiveWriteError(ArchiveError):
    """Raised when a file or directory of an archive entry cannot be written."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class ConfigError(ArchiveError):
    """Raised when configuration cannot be loaded or is invalid."""

    pass
