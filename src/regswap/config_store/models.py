"""Persisted records: config.json and profiles.json entries."""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from ..keys import ManagedKeyDefinition, key_identifier

DEFAULT_PROFILE_NAME = "Default"


@dataclass
class ManagedKeyState:
    """A managed key plus the user's inclusion choice."""
    path: str
    friendly_name: str
    file_name: str
    is_included: bool = True

    @property
    def key_identifier(self) -> str:
        return key_identifier(self.file_name)

    @classmethod
    def from_definition(
        cls,
        definition: ManagedKeyDefinition,
        is_included: Optional[bool] = None,
    ) -> "ManagedKeyState":
        """Build state from a definition; definition fields are authoritative."""
        if is_included is None:
            is_included = definition.included_by_default
        return cls(
            path=definition.path,
            friendly_name=definition.friendly_name,
            file_name=definition.file_name,
            is_included=is_included,
        )

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "userFriendlyName": self.friendly_name,
            "isIncluded": self.is_included,
            "fileName": self.file_name,
        }


@dataclass
class Config:
    """User configuration persisted in config.json."""
    default_profile_name: str = DEFAULT_PROFILE_NAME
    managed_keys: list[ManagedKeyState] = field(default_factory=list)

    def included_keys(self) -> list[ManagedKeyState]:
        return [k for k in self.managed_keys if k.is_included]

    def get_key(self, path: str) -> Optional[ManagedKeyState]:
        for key in self.managed_keys:
            if key.path.lower() == path.lower():
                return key
        return None

    def to_dict(self) -> dict:
        return {
            "defaultProfileName": self.default_profile_name,
            "managedKeys": [k.to_dict() for k in self.managed_keys],
        }


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 creation date; naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def new_folder_id() -> str:
    """Generate an opaque folder id for a profile's data directory."""
    return str(uuid.uuid4())


@dataclass
class Profile:
    """A saved profile and the snapshot files it owns."""
    name: str
    folder_id: str
    creation_timestamp: Optional[datetime] = None
    # None for profiles written before the file list was recorded
    included_key_files: Optional[list[str]] = None

    def created_display(self) -> str:
        if self.creation_timestamp is None:
            return "unknown"
        return self.creation_timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")

    def to_dict(self) -> dict:
        created = None
        if self.creation_timestamp is not None:
            created = self.creation_timestamp.astimezone(timezone.utc).strftime(
                "%Y-%m-%dT%H:%M:%SZ"
            )
        return {
            "name": self.name,
            "folderNameGuid": self.folder_id,
            "creationDate": created,
            "includedKeyFiles": self.included_key_files,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        """
        Validate and build a profile from a profiles.json entry.

        Raises:
            ValueError: If the entry has no usable name or folder id
        """
        if not isinstance(data, dict):
            raise ValueError("profile entry is not an object")

        name = data.get("name")
        folder_id = data.get("folderNameGuid")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("profile entry has no name")
        if not isinstance(folder_id, str) or not folder_id.strip():
            raise ValueError(f"profile '{name}' has no folderNameGuid")

        files = data.get("includedKeyFiles")
        if files is not None:
            if not isinstance(files, list):
                raise ValueError(f"profile '{name}' has a malformed includedKeyFiles")
            # Ordered set
            files = list(dict.fromkeys(str(f) for f in files))

        return cls(
            name=name,
            folder_id=folder_id,
            creation_timestamp=_parse_timestamp(data.get("creationDate")),
            included_key_files=files,
        )
