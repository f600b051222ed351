"""Tests for backup rotation."""
import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from regswap.config_store import BackupRotator, MAX_BACKUPS
from regswap.errors import ExternalToolTimeout


class FakeClock:
    """Advances one second per call."""

    def __init__(self, start: datetime = datetime(2026, 5, 1, 9, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current


def write_backup(dest):
    dest.write_text("[HKEY_CURRENT_USER\\Software\\X]\n")
    return True


class TestBackupRotator:
    """Tests for BackupRotator."""

    @pytest.fixture
    def rotator(self, tmp_path):
        return BackupRotator(tmp_path / "backups", clock=FakeClock())

    def test_backup_file_name(self, rotator):
        assert rotator.backup("account", write_backup) is True

        [path] = rotator.list_backups("account")
        assert path.name == "account_backup_20260501090000.reg"

    def test_same_second_does_not_overwrite(self, tmp_path):
        rotator = BackupRotator(tmp_path, clock=lambda: datetime(2026, 5, 1, 9, 0, 0))

        rotator.backup("account", write_backup)
        rotator.backup("account", write_backup)

        names = sorted(p.name for p in rotator.list_backups("account"))
        assert names == ["account_backup_20260501090000.reg", "account_backup_20260501090000_1.reg"]

    def test_retention_cap(self, rotator):
        """Never more than MAX_BACKUPS files; the newest ones are kept."""
        written = []
        for _ in range(MAX_BACKUPS + 5):
            rotator.backup("account", write_backup)
            written.append(rotator.list_backups("account")[0].name)

        remaining = rotator.list_backups("account")
        assert len(remaining) == MAX_BACKUPS
        assert sorted(p.name for p in remaining) == sorted(written[-MAX_BACKUPS:])

    def test_prune_uses_creation_order(self, tmp_path):
        """Oldest files by timestamp on disk go first."""
        rotator = BackupRotator(tmp_path, max_backups=2)
        paths = []
        for index in range(4):
            path = tmp_path / f"account_backup_2026050109000{index}.reg"
            path.write_text("x")
            stamp = 1_700_000_000 + index * 60
            os.utime(path, (stamp, stamp))
            paths.append(path)

        deleted = rotator.prune("account")

        assert deleted == paths[:2]
        assert [p.exists() for p in paths] == [False, False, True, True]

    def test_identifiers_are_independent(self, rotator):
        """Pruning one key never touches another key's backups."""
        for _ in range(MAX_BACKUPS + 2):
            rotator.backup("account", write_backup)
        rotator.backup("account_old", write_backup)

        assert len(rotator.list_backups("account")) == MAX_BACKUPS
        assert len(rotator.list_backups("account_old")) == 1

    def test_unrelated_files_ignored(self, rotator):
        rotator.backups_dir.mkdir(parents=True)
        (rotator.backups_dir / "account_notes.txt").write_text("keep me")

        for _ in range(MAX_BACKUPS + 1):
            rotator.backup("account", write_backup)

        assert (rotator.backups_dir / "account_notes.txt").exists()

    def test_failed_export(self, rotator):
        """A failed export reports False and leaves no file."""
        assert rotator.backup("account", lambda dest: False) is False
        assert rotator.list_backups("account") == []

    def test_export_raising_tool_error(self, rotator):
        def timeout(dest):
            raise ExternalToolTimeout("HKCU\\X", 1)

        assert rotator.backup("account", timeout) is False

    def test_delete_failure_is_not_fatal(self, rotator, monkeypatch):
        for _ in range(MAX_BACKUPS):
            rotator.backup("account", write_backup)

        def refuse(self, *args, **kwargs):
            raise PermissionError("in use")

        monkeypatch.setattr(Path, "unlink", refuse)

        assert rotator.backup("account", write_backup) is True
        assert rotator.prune("account") == []

    def test_invalid_cap(self, tmp_path):
        with pytest.raises(ValueError):
            BackupRotator(tmp_path, max_backups=0)
