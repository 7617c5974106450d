"""Archive entry data model."""

import secrets
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import PurePosixPath

ARCHIVE_ID_RANDOM_BYTES = 8


@dataclass(frozen=True)
class ArchiveEntry:
    """
    Identity and location of one archived message.

    The archive id is ``<HHMMSS>_<16 hex chars>``; the entry lives at
    ``<root>/<YYYY>/<MM>/<DD>/<archive_id>/``.
    """

    archive_id: str
    captured_at: datetime

    @classmethod
    def generate(cls, captured_at: datetime) -> "ArchiveEntry":
        """Create an entry with a fresh random archive id."""
        random_part = secrets.token_hex(ARCHIVE_ID_RANDOM_BYTES)
        return cls(archive_id=f"{captured_at:%H%M%S}_{random_part}", captured_at=captured_at)

    @property
    def day(self) -> date:
        return self.captured_at.date()

    @property
    def relative_path(self) -> PurePosixPath:
        """Entry directory relative to the archive root."""
        return PurePosixPath(
            f"{self.captured_at:%Y}", f"{self.captured_at:%m}", f"{self.captured_at:%d}", self.archive_id
        )
