"""Configuration store: managed key inclusion flags and the default profile name.

config.json layout:

    {
      "defaultProfileName": "Default",
      "managedKeys": [
        {"path": "...", "userFriendlyName": "...", "isIncluded": true, "fileName": "x.reg"}
      ]
    }
"""
import json
import logging
from pathlib import Path
from typing import Optional, Sequence

from ..errors import ConfigParseError, NotFoundError
from ..keys import ManagedKeyDefinition, DEFAULT_KEYS
from .atomic import atomic_write_json
from .models import Config, ManagedKeyState, DEFAULT_PROFILE_NAME

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"


class ConfigStore:
    """
    Owns the user configuration.

    The persisted file only contributes user data (inclusion flags and the
    default profile name). Key paths, names and file names always come from
    the current definitions, and the key set is re-synced on every load.
    """

    def __init__(
        self,
        config_path: Path,
        definitions: Optional[Sequence[ManagedKeyDefinition]] = None,
    ):
        """
        Initialize the config store.

        Args:
            config_path: Path to config.json
            definitions: Current managed key definitions (default: DEFAULT_KEYS)
        """
        self.config_path = Path(config_path)
        self.definitions = list(definitions) if definitions is not None else list(DEFAULT_KEYS)
        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        """The current configuration, loaded on first access."""
        if self._config is None:
            self.load()
        return self._config

    def _read_persisted(self) -> dict:
        """Read config.json, raising ConfigParseError if it is unusable."""
        try:
            data = json.loads(self.config_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ConfigParseError(f"Cannot parse {self.config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigParseError(f"{self.config_path} does not contain an object")
        return data

    def load(self) -> Config:
        """
        Merge the key definitions with the persisted file and re-persist.

        Returns:
            The merged Config
        """
        persisted: dict = {}
        if self.config_path.exists():
            try:
                persisted = self._read_persisted()
            except ConfigParseError as e:
                logger.warning(f"{e}; falling back to defaults")

        # Persisted inclusion flags, keyed by path
        flags: dict[str, bool] = {}
        for entry in persisted.get("managedKeys") or []:
            if not isinstance(entry, dict):
                continue
            path = entry.get("path")
            included = entry.get("isIncluded")
            if isinstance(path, str) and isinstance(included, bool):
                flags[path.lower()] = included

        managed_keys = [
            ManagedKeyState.from_definition(d, flags.get(d.path.lower()))
            for d in self.definitions
        ]

        dropped = set(flags) - {d.path.lower() for d in self.definitions}
        if dropped:
            logger.info(f"Dropping {len(dropped)} stale key(s) from config")

        default_name = persisted.get("defaultProfileName")
        if not isinstance(default_name, str) or not default_name.strip():
            default_name = DEFAULT_PROFILE_NAME

        self._config = Config(default_profile_name=default_name, managed_keys=managed_keys)
        self.save()
        return self._config

    def save(self, config: Optional[Config] = None) -> None:
        """Persist the configuration atomically."""
        if config is not None:
            self._config = config
        atomic_write_json(self.config_path, self.config.to_dict())
        logger.debug(f"Saved config to {self.config_path}")

    def set_inclusion(self, path: str, included: bool) -> ManagedKeyState:
        """Toggle whether a managed key is part of saves and deletes."""
        key = self.config.get_key(path)
        if key is None:
            raise NotFoundError(f"Unknown managed key: {path}")

        key.is_included = included
        self.save()
        logger.info(f"{key.friendly_name}: included={included}")
        return key

    def set_default_profile_name(self, name: str) -> None:
        """Set the name used when a profile is saved without one."""
        name = name.strip()
        if not name:
            raise ValueError("Default profile name cannot be blank")

        self.config.default_profile_name = name
        self.save()
        logger.info(f"Default profile name set to '{name}'")
