"""
conftest.py
-----------
Shared pytest fixtures for diary-merge tests.

Provides fixtures for:
- Temporary diary directories
- Diary file factories
- Default configuration
"""
import pytest
from pathlib import Path
from tempfile import TemporaryDirectory

from diary_merge.config import Config


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ----- Diary Fixtures -----

@pytest.fixture
def write_files(tmp_dir):
    """Factory writing {filename: content} into the temporary directory."""

    def _write(files: dict[str, str], directory: Path | None = None) -> Path:
        target = directory or tmp_dir
        for name, content in files.items():
            (target / name).write_text(content, encoding="utf-8")
        return target

    return _write


@pytest.fixture
def sample_diary(write_files):
    """Two diary files plus an unrelated note."""
    return write_files(
        {
            "2024-01-01.md": "Jan 1",
            "2024-03-15.md": "Mar 15",
            "notes.txt": "not a diary entry",
        }
    )


@pytest.fixture
def config(tmp_dir):
    """Default configuration rooted at the temporary directory."""
    return Config(directory=tmp_dir)
