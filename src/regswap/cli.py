#!/usr/bin/env python3
"""Interactive regswap menu.

Usage:
    regswap [--base-dir DIR] [--timeout SECONDS] [--reg-command PATH] [-v]
    python -m regswap ...

Environment variables:
    REGSWAP_HOME            Base directory for profiles, backups and logs
    REGSWAP_REG_TIMEOUT     Seconds allowed per reg.exe call (default: 60)
    REGSWAP_MAX_BACKUPS     Backups kept per key (default: 10)
    REGSWAP_LOG_LEVEL       Console log level (default: WARNING)
"""
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Optional

from .config_store import Profile
from .context import AppContext, AppSettings
from .errors import RegswapError, StorageInitError
from .manager import OperationResult, ProfileManager, SaveResult
from .registry import RegExeSnapshotter
from .utils.audit_log import AUDIT_FILE_NAME, get_recent_operations, setup_audit_logging
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

MAIN_MENU = """
==== regswap ====
  1. Save current keys as a profile
  2. Load a profile
  3. Manage profiles
  4. Save a profile, then delete live keys
  5. Delete live keys without saving
  6. Options
  7. Exit"""

MANAGE_MENU = """
---- Manage profiles ----
  1. List profiles
  2. Rename a profile
  3. Delete a profile
  4. Remove leftover data directories
  0. Back"""

OPTIONS_MENU = """
---- Options ----
  1. Toggle which keys are included
  2. Set default profile name
  3. Show backups for a key
  4. Show recent activity
  0. Back"""


class Menu:
    """Numbered text menu over a ProfileManager."""

    def __init__(
        self,
        manager: ProfileManager,
        input_fn: Optional[Callable[[str], str]] = None,
        output_fn: Optional[Callable[[str], None]] = None,
    ):
        self.manager = manager
        self.context = manager.context
        self._input = input_fn or input
        self._print = output_fn or print

    # === Prompt helpers ===

    def ask(self, prompt: str) -> str:
        return self._input(prompt).strip()

    def confirm(self, prompt: str) -> bool:
        return self.ask(f"{prompt} [y/N]: ").lower() in ("y", "yes")

    def choose_profile(self, verb: str) -> Optional[Profile]:
        profiles = self.manager.list_profiles()
        if not profiles:
            self._print("No profiles saved yet.")
            return None

        self.show_profiles(profiles)
        choice = self.ask(f"Profile number to {verb} (blank to cancel): ")
        if not choice:
            return None
        if not choice.isdigit() or not 1 <= int(choice) <= len(profiles):
            self._print("Invalid selection.")
            return None
        return profiles[int(choice) - 1]

    def show_profiles(self, profiles: list[Profile]) -> None:
        for index, profile in enumerate(profiles, start=1):
            files = profile.included_key_files
            count = "?" if files is None else str(len(files))
            self._print(f"  {index}. {profile.name}  (created {profile.created_display()}, {count} key file(s))")

    def report(self, result: OperationResult) -> None:
        self._print(result.summary())

    def _confirm_overwrite(self, existing: Profile) -> bool:
        return self.confirm(f"Profile '{existing.name}' already exists. Overwrite it?")

    def _confirm_orphans(self, orphans: list[str]) -> bool:
        self._print("This profile contains files for keys that are no longer managed:")
        for name in orphans:
            self._print(f"  - {name}")
        return self.confirm("Import them anyway?")

    # === Actions ===

    def save(self) -> None:
        default = self.manager.config.default_profile_name
        name = self.ask(f"Profile name (blank for '{default}'): ")
        self.report(self.manager.save_profile(name, self._confirm_overwrite))

    def load(self) -> None:
        profile = self.choose_profile("load")
        if profile is None:
            return
        self.report(self.manager.load_profile(profile.folder_id, self._confirm_orphans))

    def delete_live(self, with_save: bool) -> None:
        keys = self.manager.config.included_keys()
        if not keys:
            self._print("Nothing to do: no managed keys are included.")
            return

        name = ""
        if with_save:
            default = self.manager.config.default_profile_name
            name = self.ask(f"Profile name to save first (blank for '{default}'): ")

        def confirm_delete(save_result: Optional[SaveResult]) -> bool:
            if save_result is not None:
                self.report(save_result)
            self._print("The following live keys will be backed up and deleted:")
            for key in keys:
                self._print(f"  - {key.friendly_name} ({key.path})")
            return self.confirm("Delete them now?")

        self.report(self.manager.delete_live_keys(
            with_save=with_save,
            profile_name=name,
            confirm_overwrite=self._confirm_overwrite,
            confirm_delete=confirm_delete,
        ))

    def list_profiles(self) -> None:
        profiles = self.manager.list_profiles()
        if not profiles:
            self._print("No profiles saved yet.")
            return
        self.show_profiles(profiles)

    def rename(self) -> None:
        profile = self.choose_profile("rename")
        if profile is None:
            return
        new_name = self.ask("New name: ")
        if not new_name:
            self._print("Rename cancelled.")
            return
        if self.manager.rename_profile(profile.folder_id, new_name):
            self._print(f"Renamed '{profile.name}' to '{new_name}'.")
        else:
            self._print(f"Warning: profile is already named '{new_name}'; nothing changed.")

    def delete_profile(self) -> None:
        profile = self.choose_profile("delete")
        if profile is None:
            return
        if self.confirm(f"Delete profile '{profile.name}' and its saved files?"):
            self.manager.delete_profile(profile.folder_id)
            self._print(f"Deleted profile '{profile.name}'.")

    def clean_stale(self) -> None:
        stale = self.manager.stale_data_dirs()
        if not stale:
            self._print("No leftover data directories.")
            return
        for folder in stale:
            self._print(f"  - {folder.name}")
        if self.confirm(f"Remove {len(stale)} leftover director(ies)?"):
            removed = self.manager.remove_stale_data_dirs()
            self._print(f"Removed {len(removed)} director(ies).")

    def toggle_keys(self) -> None:
        keys = self.manager.config.managed_keys
        for index, key in enumerate(keys, start=1):
            mark = "x" if key.is_included else " "
            self._print(f"  {index}. [{mark}] {key.friendly_name}  ({key.path})")
        choice = self.ask("Key number to toggle (blank to cancel): ")
        if not choice:
            return
        if not choice.isdigit() or not 1 <= int(choice) <= len(keys):
            self._print("Invalid selection.")
            return
        key = keys[int(choice) - 1]
        updated = self.context.config_store.set_inclusion(key.path, not key.is_included)
        state = "included" if updated.is_included else "excluded"
        self._print(f"{updated.friendly_name} is now {state}.")

    def set_default_name(self) -> None:
        name = self.ask(f"Default profile name (currently '{self.manager.config.default_profile_name}'): ")
        if not name:
            self._print("Unchanged.")
            return
        self.context.config_store.set_default_profile_name(name)
        self._print(f"Default profile name set to '{name}'.")

    def show_backups(self) -> None:
        keys = self.manager.config.managed_keys
        for index, key in enumerate(keys, start=1):
            self._print(f"  {index}. {key.friendly_name}")
        choice = self.ask("Key number (blank to cancel): ")
        if not choice.isdigit() or not 1 <= int(choice) <= len(keys):
            return
        key = keys[int(choice) - 1]
        backups = self.context.backups.list_backups(key.key_identifier)
        if not backups:
            self._print(f"No backups for {key.friendly_name}.")
            return
        self._print(f"Backups in {self.context.backups_dir}:")
        for path in backups:
            self._print(f"  {path.name}")

    def show_activity(self) -> None:
        records = get_recent_operations(self.context.logs_dir / AUDIT_FILE_NAME, limit=15)
        if not records:
            self._print("No recorded activity.")
            return
        for record in records:
            profile = f" '{record.profile}'" if record.profile else ""
            line = f"  {record.timestamp[:19]}  {record.operation}{profile}: {record.status}"
            if record.failed:
                line += f" (failed: {', '.join(record.failed)})"
            self._print(line)

    # === Loops ===

    def _submenu(self, text: str, actions: dict[str, Callable[[], None]]) -> None:
        while True:
            self._print(text)
            choice = self.ask("Select: ")
            if choice in ("0", ""):
                return
            self._dispatch(actions, choice)

    def _dispatch(self, actions: dict[str, Callable[[], None]], choice: str) -> None:
        action = actions.get(choice)
        if action is None:
            self._print("Invalid selection.")
            return
        try:
            action()
        except (RegswapError, ValueError) as e:
            self._print(f"Error: {e}")
        except OSError as e:
            logger.exception("Filesystem error")
            self._print(f"Filesystem error: {e}")

    def manage(self) -> None:
        self._submenu(MANAGE_MENU, {
            "1": self.list_profiles,
            "2": self.rename,
            "3": self.delete_profile,
            "4": self.clean_stale,
        })

    def options(self) -> None:
        self._submenu(OPTIONS_MENU, {
            "1": self.toggle_keys,
            "2": self.set_default_name,
            "3": self.show_backups,
            "4": self.show_activity,
        })

    def run(self) -> int:
        """Run the main loop until Exit. Returns the process exit code."""
        actions = {
            "1": self.save,
            "2": self.load,
            "3": self.manage,
            "4": lambda: self.delete_live(with_save=True),
            "5": lambda: self.delete_live(with_save=False),
            "6": self.options,
        }
        while True:
            self._print(MAIN_MENU)
            try:
                choice = self.ask("Select: ")
            except EOFError:
                return 0
            if choice == "7":
                return 0
            try:
                self._dispatch(actions, choice)
            except EOFError:
                return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="regswap",
        description="Save and swap registry key snapshots as named profiles",
    )
    parser.add_argument(
        "--base-dir",
        type=Path,
        help="Storage directory (default: REGSWAP_HOME or the per-user app data dir)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds allowed per reg.exe call",
    )
    parser.add_argument(
        "--reg-command",
        default="reg",
        help="reg.exe to invoke (default: reg)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging on the console",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    settings = AppSettings.from_env()
    if args.base_dir is not None:
        settings.base_dir = args.base_dir
    if args.timeout is not None:
        settings.reg_timeout = args.timeout

    try:
        logs_dir = Path(settings.base_dir) / "logs"
        setup_logging(logs_dir, verbose=args.verbose)
        setup_audit_logging(logs_dir)
        context = AppContext(settings)
    except (StorageInitError, OSError) as e:
        print(f"regswap: cannot initialize storage in {settings.base_dir}: {e}", file=sys.stderr)
        return 1

    if os.name != "nt":
        logger.warning("reg.exe is only available on Windows; registry operations will fail")

    snapshotter = RegExeSnapshotter(reg_command=args.reg_command, timeout=settings.reg_timeout)
    menu = Menu(ProfileManager(context, snapshotter))

    try:
        return menu.run()
    except KeyboardInterrupt:
        print()
        return 130


if __name__ == "__main__":
    sys.exit(main())
