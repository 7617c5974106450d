"""Append-only per-day index of archived messages."""

import json
from datetime import date
from pathlib import Path
from typing import List

from .filesystem import LocalFilesystem

INDEX_SUFFIX = ".ndjson"


class DailyIndex:
    """One newline-delimited JSON file per calendar day."""

    def __init__(self, index_dir: Path, filesystem: LocalFilesystem):
        """
        Initialize daily index.

        Args:
            index_dir: The archive root's ``index/`` directory
            filesystem: Filesystem used for locked appends
        """
        self.index_dir = index_dir
        self.filesystem = filesystem

    def path_for(self, day: date) -> Path:
        return self.index_dir / f"{day.isoformat()}{INDEX_SUFFIX}"

    def append(self, day: date, record: dict) -> None:
        """
        Append one summary record to the day's index.

        Args:
            day: Calendar day of the archived message
            record: JSON-serializable summary
        """
        line = json.dumps(record, ensure_ascii=False) + "\n"
        self.filesystem.append_locked(self.path_for(day), line.encode("utf-8"))

    def read(self, day: date) -> List[dict]:
        """
        Read all records of a day.

        The archive itself only ever appends to the index; this reader is a
        helper for tests and manual inspection of an archive tree.
        Lines that are not valid JSON are skipped.
        """
        path = self.path_for(day)
        records = []

        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            records.append(json.loads(line))
                        except json.JSONDecodeError:
                            # Skip invalid lines
                            continue

        return records
