"""Rotating per-key backups taken before destructive registry operations.

Backups live flat in one directory:

    backups/<key_identifier>_backup_<yyyyMMddHHmmss>.reg

A second backup within the same second gets a ``_<n>`` suffix.
"""
import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from ..errors import KeyOperationError

logger = logging.getLogger(__name__)

MAX_BACKUPS = 10

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def _created_at(path: Path) -> float:
    """Best available creation time of a file."""
    st = path.stat()
    birthtime = getattr(st, "st_birthtime", None)
    if birthtime is not None:
        return birthtime
    if os.name == "nt":
        return st.st_ctime
    return st.st_mtime


class BackupRotator:
    """Writes timestamped key backups and enforces the retention cap."""

    def __init__(
        self,
        backups_dir: Path,
        max_backups: int = MAX_BACKUPS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the rotator.

        Args:
            backups_dir: Flat directory holding all backups
            max_backups: Files kept per key identifier
            clock: Returns the current local time (for file names)
        """
        if max_backups < 1:
            raise ValueError("max_backups must be at least 1")
        self.backups_dir = Path(backups_dir)
        self.max_backups = max_backups
        self._clock = clock or datetime.now

    def _pattern(self, key_identifier: str) -> re.Pattern:
        return re.compile(
            rf"^{re.escape(key_identifier)}_backup_\d{{14}}(?:_\d+)?\.reg$",
            re.IGNORECASE,
        )

    def next_backup_path(self, key_identifier: str) -> Path:
        """Path for a new backup that does not collide with an existing one."""
        stamp = self._clock().strftime(TIMESTAMP_FORMAT)
        candidate = self.backups_dir / f"{key_identifier}_backup_{stamp}.reg"
        counter = 1
        while candidate.exists():
            candidate = self.backups_dir / f"{key_identifier}_backup_{stamp}_{counter}.reg"
            counter += 1
        return candidate

    def list_backups(self, key_identifier: str) -> list[Path]:
        """Backups for a key identifier, newest first."""
        return list(reversed(self._sorted_backups(key_identifier)))

    def _sorted_backups(self, key_identifier: str) -> list[Path]:
        """Backups for a key identifier, oldest first."""
        if not self.backups_dir.exists():
            return []

        pattern = self._pattern(key_identifier)
        files = [
            p for p in self.backups_dir.iterdir()
            if p.is_file() and pattern.match(p.name)
        ]
        return sorted(files, key=lambda p: (_created_at(p), p.name))

    def backup(self, key_identifier: str, export_fn: Callable[[Path], bool]) -> bool:
        """
        Write a backup via export_fn and prune old ones.

        Args:
            key_identifier: Snapshot file name without extension
            export_fn: Writes the key's current state to the given path

        Returns:
            True if the backup file was written
        """
        self.backups_dir.mkdir(parents=True, exist_ok=True)
        dest = self.next_backup_path(key_identifier)

        try:
            ok = export_fn(dest)
        except KeyOperationError as e:
            logger.warning(f"Backup of {key_identifier} failed: {e}")
            return False

        if not ok or not dest.exists():
            logger.warning(f"Backup of {key_identifier} failed")
            return False

        logger.info(f"Backed up {key_identifier} to {dest.name}")
        self.prune(key_identifier)
        return True

    def prune(self, key_identifier: str) -> list[Path]:
        """
        Delete the oldest backups beyond max_backups.

        Returns:
            The files that were deleted
        """
        backups = self._sorted_backups(key_identifier)
        excess = len(backups) - self.max_backups
        if excess <= 0:
            return []

        deleted = []
        for path in backups[:excess]:
            try:
                path.unlink()
                deleted.append(path)
                logger.debug(f"Pruned old backup {path.name}")
            except OSError as e:
                logger.warning(f"Could not delete old backup {path.name}: {e}")

        return deleted
