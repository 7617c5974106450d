"""Local filesystem operations used by the archive writer."""

import fcntl
import os
import secrets
from pathlib import Path

from mailarchive.errors import ArchiveWriteError


class LocalFilesystem:
    """
    Blocking filesystem primitives.

    Every ``OSError`` is raised as :class:`ArchiveWriteError` carrying the
    offending path.
    """

    def mkdir(self, path: Path) -> None:
        """Create a directory and its parents; an existing directory is fine."""
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArchiveWriteError(f"Cannot create directory {path}: {e}", path) from e

    def exists(self, path: Path) -> bool:
        return path.exists()

    def dump_file(self, path: Path, data: bytes) -> None:
        """
        Write ``data`` to ``path``, replacing any existing file.

        The bytes go to a temporary sibling first and are moved into place,
        so the final name never refers to a partially written file.
        """
        tmp_path = path.with_name(f".{path.name}.{secrets.token_hex(4)}.tmp")
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError as e:
            try:
                tmp_path.unlink()
            except OSError:
                pass
            raise ArchiveWriteError(f"Cannot write file {path}: {e}", path) from e

    def create_file(self, path: Path, data: bytes) -> bool:
        """
        Create ``path`` with ``data`` only if it does not exist yet.

        Returns:
            True if the file was created, False if it already existed
        """
        try:
            with open(path, "xb") as f:
                f.write(data)
        except FileExistsError:
            return False
        except OSError as e:
            raise ArchiveWriteError(f"Cannot create file {path}: {e}", path) from e
        return True

    def append_locked(self, path: Path, data: bytes) -> None:
        """
        Append ``data`` to ``path`` under an exclusive lock.

        The lock is held for the single write, so concurrent appenders in
        other threads or processes never interleave their records.
        """
        try:
            with open(path, "ab") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                try:
                    f.write(data)
                    f.flush()
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except OSError as e:
            raise ArchiveWriteError(f"Cannot append to {path}: {e}", path) from e
