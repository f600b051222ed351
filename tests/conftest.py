"""Shared fixtures: an in-memory registry and a temporary regswap home."""
from pathlib import Path

import pytest

from regswap.context import AppContext, AppSettings
from regswap.keys import ManagedKeyDefinition
from regswap.manager import ProfileManager
from regswap.registry import RegistrySnapshotter, read_root_key

KEY_A = r"HKEY_CURRENT_USER\Software\Game\Account"
KEY_B = r"HKEY_CURRENT_USER\Software\Game\Launcher"


class FakeRegistry(RegistrySnapshotter):
    """Registry stand-in: key path -> value text."""

    def __init__(self):
        self.keys: dict[str, str] = {}
        self.fail_export: set[str] = set()
        self.fail_import: set[str] = set()
        self.fail_delete: set[str] = set()
        self.imported: list[str] = []
        self.deleted: list[str] = []

    def exists(self, path: str) -> bool:
        return path in self.keys

    def export(self, path: str, dest: Path) -> bool:
        if path in self.fail_export or path not in self.keys:
            return False
        Path(dest).write_text(f"Windows Registry Editor Version 5.00\n\n[{path}]\n{self.keys[path]}\n")
        return True

    def import_file(self, src: Path) -> bool:
        src = Path(src)
        if src.name in self.fail_import or not src.is_file():
            return False
        root = read_root_key(src)
        self.keys[root] = src.read_text().strip().splitlines()[-1]
        self.imported.append(src.name)
        return True

    def delete(self, path: str) -> bool:
        if path in self.fail_delete:
            return False
        self.keys.pop(path, None)
        self.deleted.append(path)
        return True


@pytest.fixture
def definitions():
    return [
        ManagedKeyDefinition(path=KEY_A, friendly_name="Account", file_name="account.reg"),
        ManagedKeyDefinition(path=KEY_B, friendly_name="Launcher", file_name="launcher.reg"),
    ]


@pytest.fixture
def registry():
    reg = FakeRegistry()
    reg.keys[KEY_A] = '"User"="alice"'
    reg.keys[KEY_B] = '"Region"="EU"'
    return reg


@pytest.fixture
def context(tmp_path, definitions):
    return AppContext(AppSettings(base_dir=tmp_path / "home"), definitions=definitions)


@pytest.fixture
def manager(context, registry):
    return ProfileManager(context, registry)
