"""Tests for the profile catalog."""
import json
from datetime import datetime, timezone

import pytest

from regswap.config_store import Profile, ProfileStore
from regswap.errors import DuplicateNameError, NotFoundError


def make_profile(name: str, folder_id: str, files=("a.reg",)) -> Profile:
    return Profile(
        name=name,
        folder_id=folder_id,
        creation_timestamp=datetime(2026, 3, 1, 12, 30, tzinfo=timezone.utc),
        included_key_files=list(files),
    )


class TestProfileSerialization:
    """Tests for profiles.json entries."""

    def test_to_dict(self):
        data = make_profile("Main", "f-1").to_dict()

        assert data == {
            "name": "Main",
            "folderNameGuid": "f-1",
            "creationDate": "2026-03-01T12:30:00Z",
            "includedKeyFiles": ["a.reg"],
        }

    def test_from_dict_fills_missing_fields(self):
        """Older entries without a file list or date still load."""
        profile = Profile.from_dict({"name": "Old", "folderNameGuid": "f-2"})

        assert profile.included_key_files is None
        assert profile.creation_timestamp is None
        assert profile.created_display() == "unknown"

    def test_from_dict_naive_date_is_utc(self):
        profile = Profile.from_dict({
            "name": "X", "folderNameGuid": "f", "creationDate": "2026-01-02T03:04:05",
        })

        assert profile.creation_timestamp == datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_from_dict_dedupes_files(self):
        profile = Profile.from_dict({
            "name": "X", "folderNameGuid": "f", "includedKeyFiles": ["a.reg", "b.reg", "a.reg"],
        })

        assert profile.included_key_files == ["a.reg", "b.reg"]

    @pytest.mark.parametrize("entry", [
        {"folderNameGuid": "f"},
        {"name": "  ", "folderNameGuid": "f"},
        {"name": "X"},
        {"name": "X", "folderNameGuid": "f", "includedKeyFiles": "a.reg"},
        "not an object",
    ])
    def test_from_dict_rejects_invalid(self, entry):
        with pytest.raises(ValueError):
            Profile.from_dict(entry)


class TestProfileStore:
    """Tests for ProfileStore."""

    @pytest.fixture
    def catalog_path(self, tmp_path):
        return tmp_path / "profiles.json"

    @pytest.fixture
    def store(self, catalog_path):
        return ProfileStore(catalog_path)

    def test_missing_file_is_empty(self, store):
        assert store.list() == []

    @pytest.mark.parametrize("content", ["", "   \n", "{broken", '{"name": "x"}'])
    def test_malformed_file_is_empty(self, catalog_path, content):
        """Malformed or empty catalogs load empty instead of failing."""
        catalog_path.write_text(content)

        assert ProfileStore(catalog_path).list() == []

    def test_invalid_entries_skipped(self, catalog_path):
        catalog_path.write_text(json.dumps([
            {"name": "Good", "folderNameGuid": "f-1", "includedKeyFiles": []},
            {"name": "No folder"},
            {"name": "good", "folderNameGuid": "f-2"},
            {"name": "Other", "folderNameGuid": "f-1"},
        ]))

        store = ProfileStore(catalog_path)

        assert [p.name for p in store.list()] == ["Good", "good"]

    def test_duplicate_name_loaded_with_suffix(self, catalog_path):
        """An exact duplicate name with its own folder id is kept under a new name."""
        catalog_path.write_text(json.dumps([
            {"name": "Main", "folderNameGuid": "f-1"},
            {"name": "Main", "folderNameGuid": "f-2"},
            {"name": "Main (2)", "folderNameGuid": "f-3"},
        ]))

        store = ProfileStore(catalog_path)

        assert [(p.folder_id, p.name) for p in store.list()] == [
            ("f-1", "Main"), ("f-2", "Main (2)"), ("f-3", "Main (2) (2)"),
        ]

    def test_add_and_persist(self, store, catalog_path):
        store.add(make_profile("Main", "f-1"))
        store.persist()

        reloaded = ProfileStore(catalog_path)
        assert [p.name for p in reloaded.list()] == ["Main"]
        assert reloaded.get("f-1").creation_timestamp.year == 2026

    def test_add_duplicate_name(self, store):
        """Names are unique; names differing only in case are distinct."""
        store.add(make_profile("Main", "f-1"))
        store.add(make_profile("MAIN", "f-2"))

        with pytest.raises(DuplicateNameError):
            store.add(make_profile("Main", "f-3"))

    def test_add_duplicate_folder_id(self, store):
        store.add(make_profile("Main", "f-1"))

        with pytest.raises(ValueError):
            store.add(make_profile("Other", "f-1"))

    def test_rename(self, store):
        store.add(make_profile("Main", "f-1"))

        assert store.rename("f-1", "Alt") is True
        assert store.find_by_name("Alt").folder_id == "f-1"

    def test_rename_same_name(self, store):
        store.add(make_profile("Main", "f-1"))

        assert store.rename("f-1", "Main") is False

    def test_rename_case_only(self, store):
        """Changing only the case is not a collision with itself."""
        store.add(make_profile("Main", "f-1"))

        assert store.rename("f-1", "MAIN") is True
        assert store.get("f-1").name == "MAIN"

    def test_rename_collision(self, store):
        store.add(make_profile("Main", "f-1"))
        store.add(make_profile("Alt", "f-2"))

        with pytest.raises(DuplicateNameError):
            store.rename("f-2", "Main")

    def test_rename_unknown(self, store):
        with pytest.raises(NotFoundError):
            store.rename("missing", "X")

    def test_remove(self, store):
        store.add(make_profile("Main", "f-1"))

        removed = store.remove("f-1")

        assert removed.name == "Main"
        assert store.list() == []
        with pytest.raises(NotFoundError):
            store.remove("f-1")
