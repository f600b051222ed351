"""Atomic file writes for the persisted catalogs."""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def atomic_write_text(path: Path, content: str) -> None:
    """
    Write a text file using the write-then-rename pattern.

    The temporary file lives in the target directory so the final
    os.replace is atomic; readers never see a half-written file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError as cleanup_error:
            logger.debug(f"Failed to clean up temp file {temp_path}: {cleanup_error}")
        raise


def atomic_write_json(path: Path, data: Any) -> None:
    """Serialize data as indented JSON and write it atomically."""
    atomic_write_text(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
