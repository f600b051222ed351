"""Managed registry key definitions.

The compiled-in key list can be replaced by a ``managed_keys.yaml`` file in the
base directory:

```yaml
defaults:
  included_by_default: true
keys:
  - path: HKEY_CURRENT_USER\\Software\\Blizzard Entertainment\\Battle.net
    friendly_name: Battle.net client
    file_name: battlenet.reg
  - path: HKEY_CURRENT_USER\\Software\\Valve\\Steam
    friendly_name: Steam client
    file_name: steam.reg
    included_by_default: false
```
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

KEYS_FILE_NAME = "managed_keys.yaml"


def key_identifier(file_name: str) -> str:
    """Backup identifier for a snapshot file: the file name without extension."""
    return Path(file_name).stem


@dataclass(frozen=True)
class ManagedKeyDefinition:
    """A registry subtree regswap knows how to snapshot."""
    path: str
    friendly_name: str
    file_name: str
    included_by_default: bool = True

    @property
    def key_identifier(self) -> str:
        return key_identifier(self.file_name)


DEFAULT_KEYS: tuple[ManagedKeyDefinition, ...] = (
    ManagedKeyDefinition(
        path=r"HKEY_CURRENT_USER\Software\Blizzard Entertainment\Battle.net",
        friendly_name="Battle.net client session",
        file_name="battlenet.reg",
    ),
    ManagedKeyDefinition(
        path=r"HKEY_CURRENT_USER\Software\Blizzard Entertainment\Overwatch",
        friendly_name="Overwatch settings",
        file_name="overwatch.reg",
    ),
    ManagedKeyDefinition(
        path=r"HKEY_CURRENT_USER\Software\Valve\Steam",
        friendly_name="Steam client (auto-login user)",
        file_name="steam.reg",
        included_by_default=False,
    ),
)


class KeyDefinitionError(ValueError):
    """managed_keys.yaml is malformed."""
    pass


def _parse_definitions(data: dict) -> list[ManagedKeyDefinition]:
    if not isinstance(data, dict):
        raise KeyDefinitionError("top level must be a mapping")

    defaults = data.get("defaults") or {}
    entries = data.get("keys")
    if not isinstance(entries, list) or not entries:
        raise KeyDefinitionError("'keys' must be a non-empty list")

    definitions = []
    seen_paths: set[str] = set()
    seen_files: set[str] = set()

    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise KeyDefinitionError(f"key #{index} is not a mapping")

        # Merge defaults
        merged = {**defaults, **entry}

        path = str(merged.get("path") or "").strip()
        file_name = str(merged.get("file_name") or "").strip()
        if not path or not file_name:
            raise KeyDefinitionError(f"key #{index} needs 'path' and 'file_name'")
        if not file_name.lower().endswith(".reg"):
            raise KeyDefinitionError(f"key #{index}: file_name must end in .reg")

        if path.lower() in seen_paths:
            raise KeyDefinitionError(f"duplicate path: {path}")
        if file_name.lower() in seen_files:
            raise KeyDefinitionError(f"duplicate file_name: {file_name}")
        seen_paths.add(path.lower())
        seen_files.add(file_name.lower())

        definitions.append(ManagedKeyDefinition(
            path=path,
            friendly_name=str(merged.get("friendly_name") or path),
            file_name=file_name,
            included_by_default=bool(merged.get("included_by_default", True)),
        ))

    return definitions


def load_key_definitions(base_dir: Optional[Path] = None) -> list[ManagedKeyDefinition]:
    """
    Load the managed key definitions.

    Args:
        base_dir: Directory searched for managed_keys.yaml

    Returns:
        Definitions from managed_keys.yaml if present and valid,
        otherwise the compiled-in DEFAULT_KEYS.
    """
    if base_dir is not None:
        keys_path = Path(base_dir) / KEYS_FILE_NAME
        if keys_path.exists():
            try:
                with open(keys_path, encoding="utf-8") as f:
                    data = yaml.safe_load(f)
                definitions = _parse_definitions(data)
                logger.info(f"Loaded {len(definitions)} key definitions from {keys_path}")
                return definitions
            except (yaml.YAMLError, KeyDefinitionError, OSError) as e:
                logger.warning(f"Ignoring {keys_path}, using built-in keys: {e}")

    return list(DEFAULT_KEYS)
