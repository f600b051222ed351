"""Application settings and the startup context.

Environment variables:
- REGSWAP_HOME: Base directory (default: %APPDATA%\\regswap or ~/.regswap)
- REGSWAP_REG_TIMEOUT: Seconds allowed per reg.exe call (default: 60)
- REGSWAP_MAX_BACKUPS: Backups kept per managed key (default: 10)
"""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config_store import (
    BackupRotator,
    ConfigStore,
    ProfileStore,
    CONFIG_FILE_NAME,
    PROFILES_FILE_NAME,
    MAX_BACKUPS,
)
from .errors import StorageInitError
from .keys import ManagedKeyDefinition, load_key_definitions
from .registry import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


def default_base_dir() -> Path:
    """User-scoped base directory."""
    appdata = os.environ.get("APPDATA")
    if os.name == "nt" and appdata:
        return Path(appdata) / "regswap"
    return Path.home() / ".regswap"


@dataclass
class AppSettings:
    """Runtime settings."""
    base_dir: Path = field(default_factory=default_base_dir)
    reg_timeout: float = DEFAULT_TIMEOUT
    max_backups: int = MAX_BACKUPS

    @classmethod
    def from_env(cls) -> "AppSettings":
        """Load settings from environment variables."""
        home = os.environ.get("REGSWAP_HOME")
        base_dir = Path(home).expanduser() if home else default_base_dir()

        try:
            reg_timeout = float(os.environ.get("REGSWAP_REG_TIMEOUT", str(DEFAULT_TIMEOUT)))
        except ValueError:
            logger.warning("Invalid REGSWAP_REG_TIMEOUT, using default")
            reg_timeout = DEFAULT_TIMEOUT

        try:
            max_backups = int(os.environ.get("REGSWAP_MAX_BACKUPS", str(MAX_BACKUPS)))
        except ValueError:
            logger.warning("Invalid REGSWAP_MAX_BACKUPS, using default")
            max_backups = MAX_BACKUPS

        return cls(
            base_dir=base_dir,
            reg_timeout=reg_timeout,
            max_backups=max(1, max_backups),
        )


class AppContext:
    """
    Everything a session needs, built once at startup.

    Directory structure:
        <base_dir>/
        ├── config.json
        ├── profiles.json
        ├── managed_keys.yaml   # optional key definitions
        ├── profile_data/       # one directory per profile folder id
        ├── backups/            # rotated per-key backups
        └── logs/
    """

    def __init__(
        self,
        settings: AppSettings,
        definitions: Optional[list[ManagedKeyDefinition]] = None,
    ):
        self.settings = settings
        self.base_dir = Path(settings.base_dir)
        self._ensure_directories()

        if definitions is None:
            definitions = load_key_definitions(self.base_dir)
        self.definitions = list(definitions)

        self.config_store = ConfigStore(self.config_path, self.definitions)
        self.config_store.load()
        self.profile_store = ProfileStore(self.profiles_path)
        self.backups = BackupRotator(self.backups_dir, max_backups=settings.max_backups)

    def _ensure_directories(self) -> None:
        """Create directory structure if it doesn't exist."""
        for d in (self.base_dir, self.profile_data_dir, self.backups_dir, self.logs_dir):
            try:
                d.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageInitError(f"Cannot create {d}: {e}") from e

        logger.debug(f"Storage initialized at {self.base_dir}")

    @property
    def config_path(self) -> Path:
        return self.base_dir / CONFIG_FILE_NAME

    @property
    def profiles_path(self) -> Path:
        return self.base_dir / PROFILES_FILE_NAME

    @property
    def profile_data_dir(self) -> Path:
        return self.base_dir / "profile_data"

    @property
    def backups_dir(self) -> Path:
        return self.base_dir / "backups"

    @property
    def logs_dir(self) -> Path:
        return self.base_dir / "logs"
