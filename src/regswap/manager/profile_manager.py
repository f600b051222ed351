"""Profile workflows: save, load, delete live keys, rename, delete.

ProfileManager is the only component that talks to the registry and mutates
both the config and the profile catalog within one operation. Every workflow
reports per-key outcomes and an overall status; individual key failures never
abort the remaining keys.
"""
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from ..config_store import Config, ManagedKeyState, Profile, new_folder_id
from ..context import AppContext
from ..errors import (
    DeleteFailure,
    ExportFailure,
    ImportFailure,
    KeyOperationError,
    NotFoundError,
)
from ..keys import key_identifier
from ..registry import RegistrySnapshotter, read_root_key
from ..utils.audit_log import log_operation
from ..utils.logging_config import timed_section
from .results import (
    DeleteResult,
    KeyOutcome,
    KeyStatus,
    LoadResult,
    OperationStatus,
    SaveResult,
    overall_status,
)

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".reg"

ConfirmOverwrite = Callable[[Profile], bool]
ConfirmOrphans = Callable[[list[str]], bool]
ConfirmDelete = Callable[[Optional[SaveResult]], bool]


class ProfileManager:
    """Coordinates the stores, the backup rotator and the registry."""

    def __init__(self, context: AppContext, snapshotter: RegistrySnapshotter):
        self.context = context
        self.snapshotter = snapshotter
        self.config_store = context.config_store
        self.profile_store = context.profile_store
        self.backups = context.backups

    @property
    def config(self) -> Config:
        return self.config_store.config

    def profile_dir(self, folder_id: str) -> Path:
        return self.context.profile_data_dir / folder_id

    def list_profiles(self) -> list[Profile]:
        return self.profile_store.list()

    # === Save ===

    def _allocate_folder_id(self) -> str:
        while True:
            folder_id = new_folder_id()
            if self.profile_store.get(folder_id) is None and not self.profile_dir(folder_id).exists():
                return folder_id

    def _export_key(self, key: ManagedKeyState, dest: Path) -> KeyOutcome:
        """Export one live key into a profile directory."""
        outcome = KeyOutcome(file_name=key.file_name, label=key.friendly_name, status=KeyStatus.OK)
        try:
            if not self.snapshotter.exists(key.path):
                outcome.status = KeyStatus.SKIPPED
                outcome.message = "not present in the registry"
                return outcome

            if not self.snapshotter.export(key.path, dest) or not dest.exists():
                raise ExportFailure(key.path, "reg export failed")
        except KeyOperationError as e:
            logger.error(f"Export of {key.friendly_name} failed: {e}")
            outcome.status = KeyStatus.FAILED
            outcome.error = e
            outcome.message = str(e)

        return outcome

    def save_profile(
        self,
        name: str = "",
        confirm_overwrite: Optional[ConfirmOverwrite] = None,
    ) -> SaveResult:
        """
        Snapshot the included keys into a new profile.

        Args:
            name: Profile name; blank uses the configured default name
            confirm_overwrite: Asked before replacing a same-named profile;
                without it an existing profile is never replaced

        Returns:
            SaveResult. PARTIAL_SUCCESS means the profile was not recorded.
        """
        resolved = name.strip() or self.config.default_profile_name

        existing = self.profile_store.find_by_name(resolved)
        if existing is not None:
            if confirm_overwrite is None or not confirm_overwrite(existing):
                logger.info(f"Save of '{resolved}' cancelled: overwrite declined")
                log_operation("save_profile", OperationStatus.CANCELLED.value, profile=resolved)
                return SaveResult(status=OperationStatus.CANCELLED, name=resolved)

        included = self.config.included_keys()
        if not included:
            logger.info("Save skipped: no managed keys are included")
            return SaveResult(status=OperationStatus.NOTHING_TO_DO, name=resolved)

        with timed_section("save_profile", target=resolved, keys=len(included)):
            folder_id = self._allocate_folder_id()
            folder = self.profile_dir(folder_id)
            folder.mkdir(parents=True)

            outcomes = [self._export_key(key, folder / key.file_name) for key in included]
            result = SaveResult(status=overall_status(outcomes), outcomes=outcomes, name=resolved)

            if result.failed:
                # The old profile (if any) is untouched; drop the partial snapshot
                shutil.rmtree(folder, ignore_errors=True)
                logger.error(f"Profile '{resolved}' not saved: {len(result.failed)} export(s) failed")
            else:
                profile = Profile(
                    name=resolved,
                    folder_id=folder_id,
                    creation_timestamp=datetime.now(timezone.utc),
                    included_key_files=[o.file_name for o in result.succeeded],
                )
                # Swap only after the new snapshot is complete
                if existing is not None:
                    self.profile_store.remove(existing.folder_id)
                self.profile_store.add(profile)
                self.profile_store.persist()
                if existing is not None:
                    self._remove_profile_dir(existing)

                result.profile = profile
                result.replaced = existing
                logger.info(f"Saved profile '{resolved}' as {folder_id}")

        log_operation(
            "save_profile",
            result.status.value,
            profile=resolved,
            succeeded=[o.file_name for o in result.succeeded],
            failed=[o.file_name for o in result.failed],
        )
        return result

    # === Load ===

    def _restore_file(
        self,
        src: Path,
        live_path: Optional[str],
        identifier: str,
        label: str,
    ) -> KeyOutcome:
        """Back up the live key (when known and present), then import src."""
        outcome = KeyOutcome(file_name=src.name, label=label, status=KeyStatus.OK)

        if live_path:
            try:
                present = self.snapshotter.exists(live_path)
            except KeyOperationError as e:
                logger.warning(f"Could not check {live_path} before import: {e}")
                present = False

            if present:
                outcome.backed_up = self.backups.backup(
                    identifier,
                    lambda dest: self.snapshotter.export(live_path, dest),
                )
                if not outcome.backed_up:
                    logger.warning(f"No backup of {label} could be taken; importing anyway")

        try:
            if not self.snapshotter.import_file(src):
                raise ImportFailure(src.name, "reg import failed")
        except KeyOperationError as e:
            logger.error(f"Import of {src.name} failed: {e}")
            outcome.status = KeyStatus.FAILED
            outcome.error = e
            outcome.message = str(e)

        return outcome

    def _resolve_live_path(self, src: Path) -> Optional[str]:
        """Managed key path named by a snapshot file's header, if any."""
        root = read_root_key(src)
        key = self.config.get_key(root) if root else None
        return key.path if key else None

    def load_profile(
        self,
        folder_id: str,
        confirm_orphans: Optional[ConfirmOrphans] = None,
    ) -> LoadResult:
        """
        Import a profile's snapshot files over the live registry.

        Args:
            folder_id: Folder id of the profile to load
            confirm_orphans: Receives orphaned file names; they are imported
                only if it returns True

        Raises:
            NotFoundError: If the profile or its data directory is missing
        """
        profile = self.profile_store.get(folder_id)
        if profile is None:
            raise NotFoundError(f"No profile with folder id {folder_id}")

        folder = self.profile_dir(folder_id)
        if not folder.is_dir():
            raise NotFoundError(f"Data directory for profile '{profile.name}' is missing: {folder}")

        present = {
            p.name.lower(): p.name for p in folder.iterdir()
            if p.is_file() and p.suffix.lower() == SNAPSHOT_SUFFIX
        }

        if profile.included_key_files is not None:
            wanted = {f.lower() for f in profile.included_key_files}
        else:
            # Older profiles: import whatever is on disk
            logger.info(f"Profile '{profile.name}' has no file list; using directory contents")
            wanted = set(present)

        outcomes: list[KeyOutcome] = []
        imported: set[str] = set()

        with timed_section("load_profile", target=profile.name):
            for key in self.config.managed_keys:
                lowered = key.file_name.lower()
                if lowered not in wanted:
                    continue
                src = folder / present.get(lowered, key.file_name)
                outcome = self._restore_file(src, key.path, key.key_identifier, key.friendly_name)
                outcome.file_name = key.file_name
                outcomes.append(outcome)
                imported.add(lowered)

            defined = {k.file_name.lower() for k in self.config.managed_keys}
            orphans = sorted(
                original for lowered, original in present.items()
                if lowered not in imported and lowered not in defined
            )

            orphans_imported = False
            if orphans:
                logger.info(f"Profile '{profile.name}' has orphaned files: {', '.join(orphans)}")
                if confirm_orphans is not None and confirm_orphans(list(orphans)):
                    orphans_imported = True
                    for file_name in orphans:
                        src = folder / file_name
                        outcomes.append(self._restore_file(
                            src,
                            self._resolve_live_path(src),
                            key_identifier(file_name),
                            file_name,
                        ))

        result = LoadResult(
            status=overall_status(outcomes),
            outcomes=outcomes,
            profile=profile,
            orphans=orphans,
            orphans_imported=orphans_imported,
        )

        log_operation(
            "load_profile",
            result.status.value,
            profile=profile.name,
            succeeded=[o.file_name for o in result.succeeded],
            failed=[o.file_name for o in result.failed],
        )
        return result

    # === Delete live keys ===

    def _delete_key(self, key: ManagedKeyState) -> KeyOutcome:
        outcome = KeyOutcome(file_name=key.file_name, label=key.friendly_name, status=KeyStatus.OK)
        try:
            if not self.snapshotter.exists(key.path):
                outcome.status = KeyStatus.SKIPPED
                outcome.message = "not present in the registry"
                return outcome

            outcome.backed_up = self.backups.backup(
                key.key_identifier,
                lambda dest: self.snapshotter.export(key.path, dest),
            )
            if not outcome.backed_up:
                raise DeleteFailure(key.path, "backup failed, key left in place")

            if not self.snapshotter.delete(key.path):
                raise DeleteFailure(key.path, "reg delete failed")
        except KeyOperationError as e:
            logger.error(f"Delete of {key.friendly_name} failed: {e}")
            outcome.status = KeyStatus.FAILED
            outcome.error = e
            outcome.message = str(e)

        return outcome

    def delete_live_keys(
        self,
        with_save: bool = False,
        profile_name: str = "",
        confirm_overwrite: Optional[ConfirmOverwrite] = None,
        confirm_delete: Optional[ConfirmDelete] = None,
    ) -> DeleteResult:
        """
        Back up and delete every included key from the live registry.

        Args:
            with_save: Save a profile first (see save_profile)
            profile_name: Name for that profile
            confirm_overwrite: Passed to save_profile
            confirm_delete: Asked after the optional save, with its result;
                returning False cancels the deletion. Without it nothing
                is deleted
        """
        included = self.config.included_keys()
        if not included:
            logger.info("Delete skipped: no managed keys are included")
            return DeleteResult(status=OperationStatus.NOTHING_TO_DO)

        save_result = None
        if with_save:
            save_result = self.save_profile(profile_name, confirm_overwrite)

        if confirm_delete is None or not confirm_delete(save_result):
            logger.info("Delete of live keys cancelled")
            log_operation("delete_live_keys", OperationStatus.CANCELLED.value)
            return DeleteResult(status=OperationStatus.CANCELLED, save_result=save_result)

        with timed_section("delete_live_keys", keys=len(included)):
            outcomes = [self._delete_key(key) for key in included]

        result = DeleteResult(
            status=overall_status(outcomes),
            outcomes=outcomes,
            save_result=save_result,
        )
        log_operation(
            "delete_live_keys",
            result.status.value,
            profile=save_result.name if save_result else None,
            succeeded=[o.file_name for o in result.succeeded],
            failed=[o.file_name for o in result.failed],
        )
        return result

    # === Catalog maintenance ===

    def rename_profile(self, folder_id: str, new_name: str) -> bool:
        """
        Rename a profile.

        Returns:
            False (and logs a warning) if the name is unchanged
        """
        profile = self.profile_store.get(folder_id)
        old_name = profile.name if profile else folder_id

        if not self.profile_store.rename(folder_id, new_name):
            logger.warning(f"Profile '{old_name}' already has that name")
            return False

        self.profile_store.persist()
        logger.info(f"Renamed profile '{old_name}' to '{new_name.strip()}'")
        log_operation("rename_profile", OperationStatus.FULL_SUCCESS.value, profile=new_name.strip())
        return True

    def _remove_profile_dir(self, profile: Profile) -> None:
        folder = self.profile_dir(profile.folder_id)
        if not folder.exists():
            return
        try:
            shutil.rmtree(folder)
        except OSError as e:
            logger.warning(f"Could not remove data directory of '{profile.name}': {e}")

    def delete_profile(self, folder_id: str) -> Profile:
        """Remove a profile from the catalog, then delete its data directory."""
        profile = self.profile_store.remove(folder_id)
        self.profile_store.persist()
        self._remove_profile_dir(profile)

        logger.info(f"Deleted profile '{profile.name}'")
        log_operation("delete_profile", OperationStatus.FULL_SUCCESS.value, profile=profile.name)
        return profile

    def stale_data_dirs(self) -> list[Path]:
        """Data directories with no catalog entry (e.g. left by an interrupted delete)."""
        root = self.context.profile_data_dir
        if not root.exists():
            return []
        known = {p.folder_id for p in self.profile_store.list()}
        return sorted(d for d in root.iterdir() if d.is_dir() and d.name not in known)

    def remove_stale_data_dirs(self) -> list[Path]:
        removed = []
        for folder in self.stale_data_dirs():
            try:
                shutil.rmtree(folder)
                removed.append(folder)
            except OSError as e:
                logger.warning(f"Could not remove {folder}: {e}")
        return removed
