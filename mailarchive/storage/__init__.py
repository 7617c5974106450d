"""Data persistence layer"""

from .archive_store import ArchiveStore
from .daily_index import DailyIndex
from .filesystem import LocalFilesystem

__all__ = ["ArchiveStore", "DailyIndex", "LocalFilesystem"]
