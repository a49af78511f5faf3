"""SQLite archive of merge runs and the entries they merged."""

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Generator

from ..errors import StorageError
from .models import DiaryEntry, MergeRun

SCHEMA_SQL = """
-- One row per successful merge
CREATE TABLE IF NOT EXISTS merge_runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    exec_version INTEGER UNIQUE NOT NULL,
    directory TEXT NOT NULL,
    output_path TEXT NOT NULL,
    entry_count INTEGER NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Entries folded into the log by each run
CREATE TABLE IF NOT EXISTS merged_entries (
    run_id INTEGER REFERENCES merge_runs(id) ON DELETE CASCADE,
    entry_date DATE NOT NULL,
    source_file TEXT NOT NULL,
    content_hash TEXT NOT NULL,
    word_count INTEGER NOT NULL,
    PRIMARY KEY (run_id, source_file)
);

-- Indexes
CREATE INDEX IF NOT EXISTS idx_merged_entries_date ON merged_entries(entry_date);
CREATE INDEX IF NOT EXISTS idx_merged_entries_hash
    ON merged_entries(entry_date, content_hash);
"""


class Database:
    """SQLite operations for the merge archive."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._init_schema()

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            raise StorageError("Cannot open archive database", self.db_path) from exc
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(f"Archive query failed ({exc})", self.db_path) from exc
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self._connection() as conn:
            conn.executescript(SCHEMA_SQL)

    def latest_exec_version(self) -> int:
        """Highest execution version recorded so far, 0 for a new archive."""
        with self._connection() as conn:
            return self._max_exec_version(conn)

    def entry_recorded(self, entry: DiaryEntry) -> bool:
        """Check if an entry with the same date and content was merged before."""
        with self._connection() as conn:
            result = conn.execute(
                "SELECT 1 FROM merged_entries WHERE entry_date = ? AND content_hash = ?",
                (entry.date.isoformat(), entry.content_hash),
            ).fetchone()
            return result is not None

    def record_run(
        self, directory: Path, output_path: Path, entries: list[DiaryEntry]
    ) -> int:
        """Store a run and its entries in one transaction, return the run ID."""
        with self._connection() as conn:
            exec_version = self._max_exec_version(conn) + 1
            cursor = conn.execute(
                """
                INSERT INTO merge_runs (exec_version, directory, output_path, entry_count)
                VALUES (?, ?, ?, ?)
                """,
                (exec_version, str(directory), str(output_path), len(entries)),
            )
            run_id = cursor.lastrowid
            conn.executemany(
                """
                INSERT INTO merged_entries (run_id, entry_date, source_file,
                                            content_hash, word_count)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (
                        run_id,
                        entry.date.isoformat(),
                        entry.filename,
                        entry.content_hash,
                        entry.word_count,
                    )
                    for entry in entries
                ],
            )
            return run_id  # type: ignore

    def get_runs(self, limit: int | None = None) -> list[MergeRun]:
        """Get archived runs, newest first."""
        with self._connection() as conn:
            query = "SELECT * FROM merge_runs ORDER BY exec_version DESC"
            if limit is not None:
                query += f" LIMIT {int(limit)}"
            rows = conn.execute(query).fetchall()
            return [self._row_to_run(row) for row in rows]

    def get_stats(self) -> dict:
        """Get archive statistics."""
        with self._connection() as conn:
            runs = conn.execute("SELECT COUNT(*) FROM merge_runs").fetchone()[0]
            entries = conn.execute(
                """
                SELECT COUNT(*) AS total, COALESCE(SUM(word_count), 0) AS words,
                       MIN(entry_date) AS first_date, MAX(entry_date) AS last_date
                FROM merged_entries
                """
            ).fetchone()

            return {
                "runs": runs,
                "entries": entries["total"],
                "words": entries["words"],
                "first_date": entries["first_date"],
                "last_date": entries["last_date"],
            }

    def _max_exec_version(self, conn: sqlite3.Connection) -> int:
        row = conn.execute(
            "SELECT COALESCE(MAX(exec_version), 0) FROM merge_runs"
        ).fetchone()
        return row[0]

    def _row_to_run(self, row: sqlite3.Row) -> MergeRun:
        """Convert database row to MergeRun."""
        created_at = row["created_at"]
        return MergeRun(
            id=row["id"],
            exec_version=row["exec_version"],
            directory=row["directory"],
            output_path=row["output_path"],
            entry_count=row["entry_count"],
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )
