"""Tests for managed key definitions."""
import pytest

from regswap.keys import DEFAULT_KEYS, KEYS_FILE_NAME, key_identifier, load_key_definitions


class TestKeyIdentifier:

    def test_strips_extension(self):
        assert key_identifier("battlenet.reg") == "battlenet"
        assert key_identifier("my.game.reg") == "my.game"


class TestLoadKeyDefinitions:
    """Tests for managed_keys.yaml loading."""

    def test_builtin_without_file(self, tmp_path):
        assert load_key_definitions(tmp_path) == list(DEFAULT_KEYS)

    def test_builtin_file_names_unique(self):
        names = [d.file_name.lower() for d in DEFAULT_KEYS]
        assert len(names) == len(set(names))

    def test_yaml_with_defaults(self, tmp_path):
        """The defaults block applies to every entry unless overridden."""
        (tmp_path / KEYS_FILE_NAME).write_text(
            "defaults:\n"
            "  included_by_default: false\n"
            "keys:\n"
            "  - path: HKEY_CURRENT_USER\\Software\\A\n"
            "    friendly_name: A\n"
            "    file_name: a.reg\n"
            "  - path: HKEY_CURRENT_USER\\Software\\B\n"
            "    file_name: b.reg\n"
            "    included_by_default: true\n"
        )

        definitions = load_key_definitions(tmp_path)

        assert [d.file_name for d in definitions] == ["a.reg", "b.reg"]
        assert [d.included_by_default for d in definitions] == [False, True]
        # friendly_name falls back to the path
        assert definitions[1].friendly_name == "HKEY_CURRENT_USER\\Software\\B"

    @pytest.mark.parametrize("content", [
        "keys: []\n",
        "- just a list\n",
        "keys:\n  - path: HKCU\\A\n",
        "keys:\n  - path: HKCU\\A\n    file_name: a.txt\n",
        "keys:\n  - {path: HKCU\\A, file_name: a.reg}\n  - {path: HKCU\\B, file_name: A.REG}\n",
        "keys:\n  - {path: HKCU\\A, file_name: a.reg}\n  - {path: hkcu\\a, file_name: b.reg}\n",
        "keys: [unclosed\n",
    ])
    def test_invalid_yaml_falls_back(self, tmp_path, content):
        """Malformed files are ignored in favour of the built-in keys."""
        (tmp_path / KEYS_FILE_NAME).write_text(content)

        assert load_key_definitions(tmp_path) == list(DEFAULT_KEYS)
