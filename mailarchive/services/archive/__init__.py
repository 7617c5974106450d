"""Archive writing and the archiving entry points."""

from .archive_service import EmailArchiveService
from .archive_writer import ArchiveWriter, build_index_record, build_metadata

__all__ = ["ArchiveWriter", "EmailArchiveService", "build_index_record", "build_metadata"]
