"""Tests for configuration storage."""

import json

import pytest

from mathnorm.config import ConfigManager, get_config_manager
from mathnorm.exceptions import ConfigError
from mathnorm.models import NormalizerConfig


class TestConfigManager:
    """Loading, saving and editing settings."""

    def test_defaults_when_file_missing(self, config_manager):
        config = config_manager.load()

        assert config == NormalizerConfig()
        assert not config_manager.config_file.exists()

    def test_save_and_reload(self, config_manager):
        config_manager.save(NormalizerConfig(protect_code=False, max_input_length=1000))

        reloaded = ConfigManager(config_manager.config_dir).load()

        assert reloaded.protect_code is False
        assert reloaded.max_input_length == 1000

    def test_saved_file_is_json(self, config_manager):
        config_manager.save(NormalizerConfig(extra_commands=["grad"]))

        data = json.loads(config_manager.config_file.read_text(encoding="utf-8"))
        assert data["extra_commands"] == ["grad"]

    def test_set_extra_commands(self, config_manager):
        config = config_manager.set_value("extra_commands", "grad, \\curl,")

        assert config.extra_commands == ["grad", "curl"]
        assert ConfigManager(config_manager.config_dir).load().extra_commands == ["grad", "curl"]

    def test_set_integer(self, config_manager):
        assert config_manager.set_value("continuation_window", "4").continuation_window == 4

    def test_set_boolean(self, config_manager):
        assert config_manager.set_value("protect_code", "false").protect_code is False

    @pytest.mark.parametrize("value", ["none", "off", ""])
    def test_disable_length_limit(self, config_manager, value):
        config_manager.set_value("max_input_length", "50")

        assert config_manager.set_value("max_input_length", value).max_input_length is None

    def test_invalid_value(self, config_manager):
        with pytest.raises(ConfigError) as exc_info:
            config_manager.set_value("max_attached_word", "many")

        assert "max_attached_word" in exc_info.value.message
        assert "errors" in exc_info.value.details

    def test_negative_value_rejected(self, config_manager):
        with pytest.raises(ConfigError):
            config_manager.set_value("continuation_window", "-1")

    def test_unknown_key(self, config_manager):
        with pytest.raises(ConfigError) as exc_info:
            config_manager.set_value("colour", "red")

        assert "protect_code" in exc_info.value.details["known"]

    def test_corrupted_file_falls_back_to_defaults(self, config_manager, caplog):
        config_manager.config_dir.mkdir(parents=True)
        config_manager.config_file.write_text("{not json", encoding="utf-8")

        assert config_manager.load() == NormalizerConfig()
        assert "Ignoring unreadable config" in caplog.text

    def test_invalid_stored_value_falls_back_to_defaults(self, config_manager):
        config_manager.config_dir.mkdir(parents=True)
        config_manager.config_file.write_text('{"max_attached_word": -3}', encoding="utf-8")

        assert config_manager.load() == NormalizerConfig()

    def test_reset(self, config_manager):
        config_manager.set_value("extra_commands", "grad")

        assert config_manager.reset() == NormalizerConfig()
        assert ConfigManager(config_manager.config_dir).load() == NormalizerConfig()


class TestConfigLocation:
    """Where the settings file lives."""

    def test_env_variable(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MATHNORM_CONFIG_DIR", str(tmp_path))

        assert ConfigManager().config_file == tmp_path / "config.json"

    def test_home_directory(self, tmp_path, monkeypatch):
        monkeypatch.delenv("MATHNORM_CONFIG_DIR", raising=False)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path)

        assert ConfigManager().config_dir == tmp_path / ".mathnorm"

    def test_global_manager_follows_directory(self, tmp_path):
        first = get_config_manager(tmp_path / "a")
        second = get_config_manager(tmp_path / "b")

        assert first is not second
        assert get_config_manager() is second
