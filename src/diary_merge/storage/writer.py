"""Atomic persistence of the merged log."""

import logging
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path

from ..errors import WriteError
from .models import MergedDocument

logger = logging.getLogger(__name__)


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


class OutputWriter:
    """Write the merged document via a temporary file and a rename.

    The temporary file is created next to the target so the final
    ``os.replace`` stays on one filesystem. A failure at any point leaves
    the previous output untouched.
    """

    BACKUP_DIR = ".backup"

    def __init__(self, output_path: Path):
        self.output_path = Path(output_path)

    def write(self, document: MergedDocument) -> Path:
        """Persist the document, replacing the output file in one step."""
        target_dir = self.output_path.parent
        temp_path = None
        try:
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{self.output_path.name}.", suffix=".tmp", dir=target_dir
            )
            temp_path = Path(temp_name)
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(document.text)
                f.flush()
                os.fsync(f.fileno())
            # mkstemp creates 0600; match the old file or the umask default
            if self.output_path.exists():
                shutil.copymode(self.output_path, temp_path)
            else:
                os.chmod(temp_path, 0o666 & ~_current_umask())
            os.replace(temp_path, self.output_path)
            temp_path = None
        except (OSError, UnicodeError) as exc:
            raise WriteError("Cannot write output file", self.output_path) from exc
        finally:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)

        logger.info(f"Wrote {self.output_path}")
        return self.output_path

    def backup(self) -> Path | None:
        """Copy the current output into .backup/ with a timestamp prefix."""
        if not self.output_path.exists():
            return None

        backup_dir = self.output_path.parent / self.BACKUP_DIR
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_path = backup_dir / f"{timestamp}_{self.output_path.name}"
        try:
            backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self.output_path, backup_path)
        except OSError as exc:
            raise WriteError("Cannot back up output file", self.output_path) from exc

        logger.info(f"Backed up {self.output_path.name} to {backup_path}")
        return backup_path
