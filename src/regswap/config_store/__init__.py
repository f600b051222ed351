"""Persisted state for regswap.

This package provides:
- ConfigStore: managed key inclusion flags and the default profile name
- ProfileStore: the catalog of saved profiles
- BackupRotator: retention-capped per-key backups

Directory structure managed (see regswap.context):
    <base_dir>/
    ├── config.json
    ├── profiles.json
    ├── profile_data/<folder_id>/<file_name>.reg
    └── backups/<key_identifier>_backup_<timestamp>.reg
"""

from .models import (
    Config,
    ManagedKeyState,
    Profile,
    DEFAULT_PROFILE_NAME,
    new_folder_id,
)
from .store import ConfigStore, CONFIG_FILE_NAME
from .profiles import ProfileStore, PROFILES_FILE_NAME
from .backups import BackupRotator, MAX_BACKUPS
from .atomic import atomic_write_json, atomic_write_text

__all__ = [
    "Config",
    "ManagedKeyState",
    "Profile",
    "DEFAULT_PROFILE_NAME",
    "new_folder_id",
    "ConfigStore",
    "CONFIG_FILE_NAME",
    "ProfileStore",
    "PROFILES_FILE_NAME",
    "BackupRotator",
    "MAX_BACKUPS",
    "atomic_write_json",
    "atomic_write_text",
]
