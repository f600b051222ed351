"""Profile catalog persisted in profiles.json."""
import json
import logging
from pathlib import Path
from typing import Optional

from ..errors import DuplicateNameError, NotFoundError, ProfileCatalogParseError
from .atomic import atomic_write_json
from .models import Profile

logger = logging.getLogger(__name__)

PROFILES_FILE_NAME = "profiles.json"


def _same_name(a: str, b: str) -> bool:
    return a.strip() == b.strip()


def _disambiguate(name: str, profiles: list[Profile]) -> str:
    """First "<name> (n)" not taken by any of profiles."""
    n = 2
    while any(_same_name(p.name, f"{name} ({n})") for p in profiles):
        n += 1
    return f"{name} ({n})"


class ProfileStore:
    """
    Owns the catalog of saved profiles.

    Names are unique (exact match) among live profiles and every
    folder id maps to at most one profile. The store never touches profile
    data directories; that is the manager's job.
    """

    def __init__(self, catalog_path: Path):
        self.catalog_path = Path(catalog_path)
        self._profiles: list[Profile] = self._load()

    def _read_catalog(self) -> list:
        try:
            content = self.catalog_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ProfileCatalogParseError(f"Cannot read {self.catalog_path}: {e}") from e

        if not content.strip():
            return []

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ProfileCatalogParseError(f"Cannot parse {self.catalog_path}: {e}") from e

        if not isinstance(data, list):
            raise ProfileCatalogParseError(f"{self.catalog_path} does not contain a list")
        return data

    def _load(self) -> list[Profile]:
        """Load the catalog; unreadable files give an empty catalog."""
        if not self.catalog_path.exists():
            return []

        try:
            entries = self._read_catalog()
        except ProfileCatalogParseError as e:
            logger.warning(f"{e}; starting with an empty profile catalog")
            return []

        profiles: list[Profile] = []
        for entry in entries:
            try:
                profile = Profile.from_dict(entry)
            except ValueError as e:
                logger.warning(f"Skipping invalid profile entry: {e}")
                continue

            if any(p.folder_id == profile.folder_id for p in profiles):
                logger.warning(f"Skipping profile '{profile.name}': duplicate folder id")
                continue
            if any(_same_name(p.name, profile.name) for p in profiles):
                unique = _disambiguate(profile.name, profiles)
                logger.warning(f"Duplicate profile name '{profile.name}' ({profile.folder_id}); loaded as '{unique}'")
                profile.name = unique
            profiles.append(profile)

        logger.debug(f"Loaded {len(profiles)} profiles from {self.catalog_path}")
        return profiles

    def list(self) -> list[Profile]:
        """All profiles, in catalog order."""
        return list(self._profiles)

    def get(self, folder_id: str) -> Optional[Profile]:
        for profile in self._profiles:
            if profile.folder_id == folder_id:
                return profile
        return None

    def find_by_name(self, name: str) -> Optional[Profile]:
        for profile in self._profiles:
            if _same_name(profile.name, name):
                return profile
        return None

    def add(self, profile: Profile) -> None:
        """Add a profile to the catalog (in memory)."""
        if self.find_by_name(profile.name) is not None:
            raise DuplicateNameError(profile.name)
        if self.get(profile.folder_id) is not None:
            raise ValueError(f"Folder id already in use: {profile.folder_id}")
        self._profiles.append(profile)

    def rename(self, folder_id: str, new_name: str) -> bool:
        """
        Rename a profile (in memory).

        Returns:
            True if renamed, False if new_name equals the current name
        """
        profile = self.get(folder_id)
        if profile is None:
            raise NotFoundError(f"No profile with folder id {folder_id}")

        new_name = new_name.strip()
        if not new_name:
            raise ValueError("Profile name cannot be blank")
        if new_name == profile.name:
            return False

        other = self.find_by_name(new_name)
        if other is not None and other.folder_id != folder_id:
            raise DuplicateNameError(new_name)

        profile.name = new_name
        return True

    def remove(self, folder_id: str) -> Profile:
        """Remove a profile's catalog entry (in memory)."""
        profile = self.get(folder_id)
        if profile is None:
            raise NotFoundError(f"No profile with folder id {folder_id}")
        self._profiles.remove(profile)
        return profile

    def persist(self) -> None:
        """Write the whole catalog atomically."""
        atomic_write_json(self.catalog_path, [p.to_dict() for p in self._profiles])
        logger.debug(f"Saved {len(self._profiles)} profiles to {self.catalog_path}")
