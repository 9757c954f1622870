"""
Tests for settings resolution and the user config file.
"""

import json
from pathlib import Path

import pytest

from snip import config as snip_config
from snip.config import (
    Settings,
    default_config_file,
    get_settings,
    read_user_config,
    save_user_config,
    update_settings,
)
from snip.errors import ConfigError


@pytest.fixture
def config_file(isolated_env):
    return isolated_env / "config" / "config.json"


def write_config(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


class TestSettings:
    """Tests for settings sources and defaults."""

    def test_db_path_defaults_into_data_dir(self, tmp_path):
        settings = Settings(data_dir=tmp_path)

        assert settings.db_path == tmp_path / "db.json"

    def test_explicit_db_path(self, tmp_path):
        settings = Settings(data_dir=tmp_path, db_path=tmp_path / "other.json")

        assert settings.db_path == tmp_path / "other.json"

    def test_env_prefix(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SNIP_CONFIRM_RUN", "false")
        monkeypatch.setenv("SNIP_DEFAULT_SHELL", "zsh")

        settings = Settings()

        assert settings.confirm_run is False
        assert settings.default_shell == "zsh"

    def test_data_dir_from_env(self, isolated_env):
        settings = Settings()

        assert settings.data_dir == isolated_env / "data"
        assert settings.db_path == isolated_env / "data" / "db.json"

    def test_user_config_file(self, config_file):
        write_config(config_file, {"editor": "nano", "confirm_run": False})

        settings = Settings()

        assert settings.editor == "nano"
        assert settings.confirm_run is False

    def test_env_overrides_user_config(self, config_file, monkeypatch):
        write_config(config_file, {"editor": "nano"})
        monkeypatch.setenv("SNIP_EDITOR", "vim")

        assert Settings().editor == "vim"

    def test_explicit_config_file(self, tmp_path):
        other = tmp_path / "other.json"
        write_config(other, {"default_shell": "fish"})

        assert Settings(config_file=other).default_shell == "fish"

    def test_default_config_file_follows_env(self, config_file):
        assert default_config_file() == config_file

    def test_default_config_file_xdg(self, monkeypatch, tmp_path):
        monkeypatch.delenv("SNIP_CONFIG_FILE")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert default_config_file() == tmp_path / "snip" / "config.json"


class TestUserConfigFile:
    """Tests for reading and writing the user config file."""

    def test_missing_file(self, tmp_path):
        assert read_user_config(tmp_path / "absent.json") == {}

    def test_malformed_file_is_ignored(self, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("{oops")

        assert read_user_config(config_file) == {}
        assert Settings().confirm_run is True

    def test_non_object_is_ignored(self, config_file):
        write_config(config_file, ["editor", "nano"])

        assert read_user_config(config_file) == {}

    def test_unknown_keys_are_dropped(self, config_file):
        write_config(config_file, {"editor": "nano", "theme": "dark"})

        assert read_user_config(config_file) == {"editor": "nano"}

    def test_save_merges_and_coerces(self, config_file):
        write_config(config_file, {"editor": "nano"})

        saved = save_user_config({"confirm_run": "false"})

        assert saved == {"editor": "nano", "confirm_run": False}
        assert json.loads(config_file.read_text()) == saved

    def test_save_path_value(self, tmp_path, config_file):
        save_user_config({"data_dir": str(tmp_path / "snips")})

        assert read_user_config(config_file)["data_dir"] == str(tmp_path / "snips")

    def test_save_unknown_key(self, config_file):
        with pytest.raises(ConfigError, match="Unknown config key"):
            save_user_config({"theme": "dark"})
        assert not config_file.exists()

    def test_save_invalid_value(self):
        with pytest.raises(ConfigError, match="confirm_run"):
            save_user_config({"confirm_run": "maybe"})


class TestGlobalSettings:
    """Tests for the global settings instance."""

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_update_settings_replaces_instance(self, tmp_path):
        before = get_settings()

        after = update_settings(data_dir=tmp_path)

        assert after is not before
        assert get_settings() is after
        assert after.data_dir == tmp_path

    def test_invalid_configuration(self, monkeypatch):
        monkeypatch.setenv("SNIP_CONFIRM_RUN", "maybe")
        monkeypatch.setattr(snip_config, "_settings", None)

        with pytest.raises(ConfigError, match="Invalid configuration"):
            get_settings()
