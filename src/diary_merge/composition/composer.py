"""Compose the merged log from ordered diary entries."""

import logging
from collections.abc import Iterable
from pathlib import Path

from ..config import Config
from ..errors import ReadError
from ..storage.models import DiaryEntry, MergedDocument

logger = logging.getLogger(__name__)


class Composer:
    """Read entry bodies and join them ahead of the existing log."""

    def __init__(self, config: Config):
        self.config = config
        self.separator = config.separator

    def load(self, entries: Iterable[DiaryEntry]) -> list[DiaryEntry]:
        """Read every entry body, keeping the given order.

        Raises:
            ReadError: naming the first file that cannot be read; nothing
                has been written at that point
        """
        loaded = []
        for entry in entries:
            loaded.append(entry.with_content(self._read(entry.source_path)))
            logger.debug(f"Read {entry.filename}")
        return loaded

    def read_existing(self) -> str | None:
        """Current output content, or None when there is no output file."""
        path = self.config.output_path
        if not path.exists():
            return None
        return self._read(path)

    def compose(
        self, entries: Iterable[DiaryEntry], existing: str | None = None
    ) -> MergedDocument:
        """Join loaded entries; the existing log is kept whole, after them."""
        document = MergedDocument(
            entries=tuple(entries), separator=self.separator, existing=existing
        )
        logger.info(
            f"Composed {len(document.entries)} entries"
            + (" ahead of existing log" if existing else "")
        )
        return document

    def _read(self, path: Path) -> str:
        # newline="" keeps line endings byte-for-byte
        try:
            with open(path, encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise ReadError("Cannot read file", path) from exc
