"""
test_database.py
----------------
Unit tests for diary_merge.storage.database.

Tests the SQLite merge archive.
"""
import pytest
from datetime import date
from pathlib import Path

from diary_merge.errors import StorageError
from diary_merge.storage.database import Database
from diary_merge.storage.models import DiaryEntry


def _entry(day: int, content: str) -> DiaryEntry:
    return DiaryEntry(date(2024, 1, day), Path(f"2024-01-{day:02d}.md"), content)


@pytest.fixture
def db(tmp_dir):
    return Database(tmp_dir / "diary.db")


class TestDatabase:
    """Test Database operations."""

    def test_new_archive_is_empty(self, db):
        """Test a fresh archive has no runs."""
        assert db.latest_exec_version() == 0
        assert db.get_runs() == []

    def test_record_run(self, db, tmp_dir):
        """Test recording a run with its entries."""
        entries = [_entry(2, "Second day"), _entry(1, "First day here")]

        run_id = db.record_run(tmp_dir, tmp_dir / "writing-log.md", entries)

        runs = db.get_runs()
        assert len(runs) == 1
        assert runs[0].id == run_id
        assert runs[0].exec_version == 1
        assert runs[0].entry_count == 2
        assert runs[0].output_path == str(tmp_dir / "writing-log.md")
        assert runs[0].created_at is not None

    def test_exec_version_increments(self, db, tmp_dir):
        """Test each run gets the next execution version."""
        db.record_run(tmp_dir, tmp_dir / "log.md", [_entry(1, "a")])
        db.record_run(tmp_dir, tmp_dir / "log.md", [_entry(2, "b")])

        assert db.latest_exec_version() == 2
        assert [run.exec_version for run in db.get_runs()] == [2, 1]

    def test_get_runs_limit(self, db, tmp_dir):
        """Test the limit keeps the newest runs."""
        for day in (1, 2, 3):
            db.record_run(tmp_dir, tmp_dir / "log.md", [_entry(day, "x")])

        assert [run.exec_version for run in db.get_runs(limit=2)] == [3, 2]

    def test_get_runs_zero_limit(self, db, tmp_dir):
        """Test a zero limit returns no runs instead of all of them."""
        db.record_run(tmp_dir, tmp_dir / "log.md", [_entry(1, "x")])

        assert db.get_runs(limit=0) == []

    def test_entry_recorded(self, db, tmp_dir):
        """Test lookup by date and content."""
        db.record_run(tmp_dir, tmp_dir / "log.md", [_entry(1, "Jan 1")])

        assert db.entry_recorded(_entry(1, "Jan 1"))
        assert not db.entry_recorded(_entry(1, "Jan 1, edited"))
        assert not db.entry_recorded(_entry(2, "Jan 1"))

    def test_stats(self, db, tmp_dir):
        """Test archive totals."""
        db.record_run(
            tmp_dir, tmp_dir / "log.md", [_entry(3, "three words here"), _entry(1, "one")]
        )

        stats = db.get_stats()

        assert stats == {
            "runs": 1,
            "entries": 2,
            "words": 4,
            "first_date": "2024-01-01",
            "last_date": "2024-01-03",
        }

    def test_empty_stats(self, db):
        """Test totals of an empty archive."""
        stats = db.get_stats()
        assert stats["runs"] == 0
        assert stats["words"] == 0
        assert stats["first_date"] is None

    def test_persists_across_instances(self, tmp_dir):
        """Test data survives reopening the archive."""
        Database(tmp_dir / "diary.db").record_run(tmp_dir, tmp_dir / "log.md", [_entry(1, "a")])
        assert Database(tmp_dir / "diary.db").latest_exec_version() == 1

    def test_unopenable_path(self, tmp_dir):
        """Test a bad location raises StorageError."""
        with pytest.raises(StorageError):
            Database(tmp_dir / "missing" / "diary.db")
