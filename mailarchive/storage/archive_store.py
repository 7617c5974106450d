"""Archive root handle and directory layout."""

from pathlib import Path
from typing import Optional

from mailarchive.models.archive_entry import ArchiveEntry
from .daily_index import DailyIndex
from .filesystem import LocalFilesystem

GITIGNORE_CONTENT = "# Email Archive - Do not commit\n*\n!.gitignore\n"


class ArchiveStore:
    """
    Handle on an archive root directory.

    Layout::

        <root>/.gitignore
        <root>/index/<YYYY-MM-DD>.ndjson
        <root>/<YYYY>/<MM>/<DD>/<archive_id>/...
    """

    def __init__(self, root: Path, filesystem: Optional[LocalFilesystem] = None):
        """
        Initialize archive store.

        Args:
            root: Archive root directory
            filesystem: Filesystem implementation (default: LocalFilesystem)
        """
        self.root = root
        self.filesystem = filesystem or LocalFilesystem()
        self.index = DailyIndex(self.index_dir, self.filesystem)
        self._bootstrapped = False

    @property
    def index_dir(self) -> Path:
        return self.root / "index"

    @property
    def gitignore_path(self) -> Path:
        return self.root / ".gitignore"

    def ensure_root(self) -> None:
        """
        Create the root, its ``index/`` directory and the ``.gitignore`` marker.

        Runs once per handle; safe to race with other processes doing the same.
        """
        if self._bootstrapped:
            return

        self.filesystem.mkdir(self.index_dir)
        if not self.filesystem.exists(self.gitignore_path):
            self.filesystem.create_file(self.gitignore_path, GITIGNORE_CONTENT.encode("utf-8"))

        self._bootstrapped = True

    def entry_dir(self, entry: ArchiveEntry) -> Path:
        return self.root.joinpath(*entry.relative_path.parts)
