"""Newest-first ordering of diary entries."""

from collections.abc import Iterable, Iterator

from ..storage.models import DiaryEntry


def sort_key(entry: DiaryEntry) -> tuple:
    """Date first, filename as the tie-break for entries sharing a date."""
    return (entry.date, entry.filename)


class NewestFirst:
    """Restartable view of entries sorted by date descending.

    Sorting happens on iteration, so the view can be built before anything
    is read and iterated as many times as needed.
    """

    def __init__(self, entries: Iterable[DiaryEntry]):
        self._entries = tuple(entries)

    def __iter__(self) -> Iterator[DiaryEntry]:
        return iter(sorted(self._entries, key=sort_key, reverse=True))

    def __len__(self) -> int:
        return len(self._entries)
