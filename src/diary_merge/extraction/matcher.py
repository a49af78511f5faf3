"""Classify filenames as diary files and extract their dates."""

import logging
import re
from datetime import date

from ..config import DEFAULT_DATE_PATTERN
from ..errors import PatternError

logger = logging.getLogger(__name__)


class DateMatcher:
    """Match filenames against the date pattern.

    A filename is a diary file when it matches ``date_pattern`` and the date
    it carries is a real calendar date. The date is taken from a named group
    ``date`` when the pattern defines one, otherwise from the first
    ``YYYY-MM-DD`` run inside the matched text.
    """

    DATE_TEXT = re.compile(r"(\d{4})-(\d{2})-(\d{2})")

    def __init__(self, date_pattern: str = DEFAULT_DATE_PATTERN):
        try:
            self.pattern = re.compile(date_pattern)
        except re.error as exc:
            raise PatternError(f"Invalid date pattern {date_pattern!r} ({exc})") from exc

    def match(self, filename: str) -> date | None:
        """Return the date for a diary filename, or None if it is not one."""
        match = self.pattern.search(filename)
        if not match:
            return None

        if "date" in self.pattern.groupindex and match.group("date"):
            date_text = match.group("date")
        else:
            date_text = match.group(0)

        parts = self.DATE_TEXT.search(date_text)
        if not parts:
            return None

        try:
            return date(int(parts.group(1)), int(parts.group(2)), int(parts.group(3)))
        except ValueError:
            logger.debug(f"Ignoring {filename}: not a calendar date")
            return None
