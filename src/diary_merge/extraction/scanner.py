"""Scan the diary directory for date-named files."""

import logging
import os
from pathlib import Path

from ..config import Config
from ..errors import DirectoryError
from ..storage.models import DiaryEntry
from .matcher import DateMatcher

logger = logging.getLogger(__name__)


class DiaryScanner:
    """Collect diary files from a single directory level."""

    def __init__(self, config: Config, matcher: DateMatcher | None = None):
        self.config = config
        self.directory = Path(config.directory)
        self.matcher = matcher or DateMatcher(config.date_pattern)

    def scan(self) -> list[DiaryEntry]:
        """
        Collect diary file candidates.

        Only direct children of the directory are considered, and only
        regular files (symlinks to files count). Names that do not match the
        date pattern are skipped silently. The output file is never a
        candidate.

        Returns:
            Entries with path and date set and content unread, in directory
            listing order

        Raises:
            DirectoryError: if the directory is missing or unreadable
        """
        if not self.directory.is_dir():
            raise DirectoryError("Not a directory", self.directory)

        output_name = self._output_name()
        entries = []
        try:
            with os.scandir(self.directory) as it:
                for dir_entry in it:
                    if not dir_entry.is_file():
                        continue
                    if dir_entry.name == output_name:
                        continue

                    entry_date = self.matcher.match(dir_entry.name)
                    if entry_date is None:
                        logger.debug(f"Skipping {dir_entry.name}")
                        continue

                    entries.append(DiaryEntry(entry_date, Path(dir_entry.path)))
        except OSError as exc:
            raise DirectoryError("Cannot read directory", self.directory) from exc

        logger.info(f"Found {len(entries)} diary files in {self.directory}")
        return entries

    def _output_name(self) -> str | None:
        """Name of the output file when it lives in the scanned directory."""
        output_path = self.config.output_path
        if output_path.parent.resolve() == self.directory.resolve():
            return output_path.name
        return None
