"""Data models for diary merging."""

import dataclasses
import hashlib
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Optional


class PipelineStage(Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    ORDERING = "ordering"
    COMPOSING = "composing"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class DiaryEntry:
    """One date-named source file.

    Collected with ``content`` unset; the composer attaches the body through
    ``with_content``, which returns a new entry.
    """

    date: date
    source_path: Path
    content: Optional[str] = None

    @property
    def filename(self) -> str:
        return self.source_path.name

    def with_content(self, content: str) -> "DiaryEntry":
        return dataclasses.replace(self, content=content)

    @property
    def content_hash(self) -> str:
        """MD5 of the entry body."""
        return hashlib.md5((self.content or "").encode("utf-8")).hexdigest()

    @property
    def word_count(self) -> int:
        return len((self.content or "").split())


@dataclass(frozen=True)
class MergedDocument:
    """Newly composed entries plus the prior output text, if any."""

    entries: tuple[DiaryEntry, ...]
    separator: str
    existing: Optional[str] = None

    @property
    def body(self) -> str:
        """The new entries joined by the separator."""
        return self.separator.join(entry.content or "" for entry in self.entries)

    @property
    def text(self) -> str:
        """Full output: new block first, then the existing log."""
        if not self.entries:
            return self.existing or ""
        if not self.existing:
            return self.body
        return self.body + self.separator + self.existing


@dataclass
class MergeResult:
    """Outcome of one pipeline run."""

    output_path: Path
    entries: list[DiaryEntry]
    skipped: int = 0
    written: bool = False
    backup_path: Optional[Path] = None
    run_id: Optional[int] = None


@dataclass
class MergeRun:
    """Archived merge run."""

    id: int
    exec_version: int
    directory: str
    output_path: str
    entry_count: int
    created_at: Optional[datetime] = None
