"""Exceptions raised by the merge pipeline.

Every error carries a short ``kind`` tag, the offending ``path`` where one
applies, and the process ``exit_code`` the CLI uses for it.
"""

from pathlib import Path


class DiaryMergeError(Exception):
    """Base class for fatal merge errors."""

    kind = "error"
    exit_code = 1

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message}: {self.path}"
        return self.message


class ConfigError(DiaryMergeError):
    """Configuration file is missing or invalid."""

    kind = "config"
    exit_code = 2


class DirectoryError(DiaryMergeError):
    """Source directory is missing or unreadable."""

    kind = "directory"
    exit_code = 3


class ReadError(DiaryMergeError):
    """A matched file (or the existing output) could not be read."""

    kind = "read"
    exit_code = 4


class WriteError(DiaryMergeError):
    """The output file could not be written."""

    kind = "write"
    exit_code = 5


class PatternError(DiaryMergeError):
    """The date pattern is not a valid regular expression."""

    kind = "pattern"
    exit_code = 6


class StorageError(DiaryMergeError):
    """The merge archive database failed."""

    kind = "storage"
    exit_code = 7
