"""Tests for the archive store, daily index and filesystem primitives."""

import json
import threading
from datetime import date, datetime, timezone

import pytest

from mailarchive.errors import ArchiveWriteError
from mailarchive.models.archive_entry import ArchiveEntry
from mailarchive.storage.archive_store import GITIGNORE_CONTENT, ArchiveStore
from mailarchive.storage.daily_index import DailyIndex
from mailarchive.storage.filesystem import LocalFilesystem


class TestLocalFilesystem:
    """Test LocalFilesystem."""

    def test_dump_file_replaces_and_leaves_no_temp(self, tmp_path):
        fs = LocalFilesystem()
        target = tmp_path / "file.bin"
        fs.dump_file(target, b"first")
        fs.dump_file(target, b"second")

        assert target.read_bytes() == b"second"
        assert [p.name for p in tmp_path.iterdir()] == ["file.bin"]

    def test_dump_file_missing_directory_raises(self, tmp_path):
        target = tmp_path / "missing" / "file.bin"
        with pytest.raises(ArchiveWriteError) as exc_info:
            LocalFilesystem().dump_file(target, b"x")
        assert exc_info.value.path == target

    def test_create_file_is_exclusive(self, tmp_path):
        fs = LocalFilesystem()
        target = tmp_path / "marker"
        assert fs.create_file(target, b"one") is True
        assert fs.create_file(target, b"two") is False
        assert target.read_bytes() == b"one"

    def test_mkdir_over_file_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"")
        with pytest.raises(ArchiveWriteError):
            LocalFilesystem().mkdir(blocker / "child")

    def test_append_locked(self, tmp_path):
        fs = LocalFilesystem()
        target = tmp_path / "log"
        fs.append_locked(target, b"a\n")
        fs.append_locked(target, b"b\n")
        assert target.read_bytes() == b"a\nb\n"


class TestDailyIndex:
    """Test DailyIndex."""

    def test_path_for(self, tmp_path):
        index = DailyIndex(tmp_path, LocalFilesystem())
        assert index.path_for(date(2025, 1, 13)) == tmp_path / "2025-01-13.ndjson"

    def test_append_and_read(self, tmp_path):
        index = DailyIndex(tmp_path, LocalFilesystem())
        day = date(2025, 1, 13)
        index.append(day, {"archiveId": "1", "subject": "Grüße"})
        index.append(day, {"archiveId": "2"})

        lines = index.path_for(day).read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert "Grüße" in lines[0]
        assert [record["archiveId"] for record in index.read(day)] == ["1", "2"]

    def test_read_skips_invalid_lines(self, tmp_path):
        index = DailyIndex(tmp_path, LocalFilesystem())
        day = date(2025, 1, 13)
        index.path_for(day).write_text('{"archiveId": "1"}\nnot json\n\n{"archiveId": "2"}\n')
        assert [record["archiveId"] for record in index.read(day)] == ["1", "2"]

    def test_read_missing_day(self, tmp_path):
        assert DailyIndex(tmp_path, LocalFilesystem()).read(date(2025, 1, 1)) == []

    def test_concurrent_appends_do_not_interleave(self, tmp_path):
        index = DailyIndex(tmp_path, LocalFilesystem())
        day = date(2025, 1, 13)
        payload = "x" * 50_000

        def worker(n):
            for i in range(20):
                index.append(day, {"worker": n, "seq": i, "payload": payload})

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        lines = index.path_for(day).read_text(encoding="utf-8").splitlines()
        assert len(lines) == 80
        for line in lines:
            assert json.loads(line)["payload"] == payload


class TestArchiveStore:
    """Test ArchiveStore layout."""

    def test_ensure_root_creates_layout(self, tmp_path):
        store = ArchiveStore(tmp_path / "archive")
        store.ensure_root()

        assert store.index_dir.is_dir()
        assert store.gitignore_path.read_text() == GITIGNORE_CONTENT

    def test_existing_gitignore_is_kept(self, tmp_path):
        root = tmp_path / "archive"
        root.mkdir()
        (root / ".gitignore").write_text("custom\n")

        ArchiveStore(root).ensure_root()
        assert (root / ".gitignore").read_text() == "custom\n"

    def test_entry_dir(self, tmp_path):
        store = ArchiveStore(tmp_path)
        entry = ArchiveEntry("103000_0123456789abcdef", datetime(2025, 1, 3, 10, 30, tzinfo=timezone.utc))
        assert store.entry_dir(entry) == tmp_path / "2025" / "01" / "03" / "103000_0123456789abcdef"


class TestArchiveEntry:
    """Test archive id generation."""

    def test_generate(self):
        captured = datetime(2025, 1, 13, 9, 5, 7, tzinfo=timezone.utc)
        entry = ArchiveEntry.generate(captured)

        prefix, random_part = entry.archive_id.split("_")
        assert prefix == "090507"
        assert len(random_part) == 16
        int(random_part, 16)
        assert entry.day == date(2025, 1, 13)
        assert str(entry.relative_path) == f"2025/01/13/{entry.archive_id}"

    def test_ids_are_unique(self):
        captured = datetime(2025, 1, 13, tzinfo=timezone.utc)
        ids = {ArchiveEntry.generate(captured).archive_id for _ in range(100)}
        assert len(ids) == 100
