"""Minimal reader for exported .reg files."""
import codecs
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def _decode(raw: bytes) -> str:
    # reg.exe writes UTF-16 LE with a BOM; REGEDIT4 files are ANSI
    if raw.startswith(codecs.BOM_UTF16_LE) or raw.startswith(codecs.BOM_UTF16_BE):
        return raw.decode("utf-16")
    if raw.startswith(codecs.BOM_UTF8):
        return raw.decode("utf-8-sig")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def read_root_key(path: Path) -> Optional[str]:
    """
    Return the first key path written in a .reg file.

    For a file produced by ``reg export`` this is the exported subtree root.
    Returns None if the file cannot be read or holds no key section.
    """
    try:
        text = _decode(Path(path).read_bytes())
    except OSError as e:
        logger.debug(f"Cannot read {path}: {e}")
        return None

    for line in text.splitlines():
        line = line.strip()
        # [-KEY] sections are deletions, not keys the file writes
        if line.startswith("[") and line.endswith("]") and not line.startswith("[-"):
            key = line[1:-1].strip()
            if key:
                return key
    return None
