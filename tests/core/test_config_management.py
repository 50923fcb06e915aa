# tests/core/test_config_management.py
import json

import pytest

from agentlint.core.managers.config_manager import ConfigManager
from agentlint.core.utils.path_utils import PathUtils
from auditor.dom.core import rule_setting
from auditor.errors import WeightTableError

# A small, predictable configuration for the tests
MOCK_SETTINGS_CONTENT = {
    "debug": {
        "level": "WARNING"
    },
    "fetch": {
        "timeout": 15,
        "max_redirects": 10
    },
    "auditor": {
        "parallel_rules": True
    },
    "rules": {
        "meta_info": {
            "min_description_length": 25
        }
    }
}


@pytest.fixture
def config_env(tmp_path, monkeypatch):
    """
    Sets up an isolated environment for the ConfigManager:
    - Writes a fake 'settings.json' into a temporary directory.
    - Monkeypatches PathUtils to point at it.
    - Reloads the real settings afterwards, since the manager is a singleton.
    """
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps(MOCK_SETTINGS_CONTENT))

    monkeypatch.setattr(PathUtils, 'get_settings_file', staticmethod(lambda: settings_file))

    manager = ConfigManager()
    manager.reset()  # Force a reload from the fake file
    yield manager

    monkeypatch.undo()
    manager.reset()


def test_config_manager_is_singleton():
    assert ConfigManager() is ConfigManager()


def test_config_manager_load(config_env):
    """The manager loads the configuration from disk."""
    config = config_env.get_all()
    assert config["debug"]["level"] == "WARNING"
    assert config["fetch"]["timeout"] == 15


def test_config_manager_get_nested(config_env):
    assert config_env.get_nested("fetch.max_redirects") == 10
    assert config_env.get_nested("non.existent.key", "default") == "default"
    # Walking into a scalar yields the default too
    assert config_env.get_nested("fetch.timeout.seconds", 3) == 3


def test_config_manager_set_nested(config_env):
    """In-memory overrides, including casting to the type of the old value."""
    config_env.set_nested("debug.level", "INFO")
    assert config_env.get_nested("debug.level") == "INFO"

    # A brand new key is stored as given
    config_env.set_nested("new_feature.enabled", "True")
    assert config_env.get_nested("new_feature.enabled") == "True"

    config_env.set_nested("fetch.timeout", "30")
    assert config_env.get_nested("fetch.timeout") == 30
    assert isinstance(config_env.get_nested("fetch.timeout"), int)

    config_env.set_nested("auditor.parallel_rules", "false")
    assert config_env.get_nested("auditor.parallel_rules") is False


def test_config_manager_reset(config_env):
    """reset() reloads the configuration from disk."""
    config_env.set_nested("debug.level", "DEBUG")
    assert config_env.get_nested("debug.level") == "DEBUG"

    config_env.reset()

    assert config_env.get_nested("debug.level") == "WARNING"


def test_config_manager_missing_file_yields_empty_config(tmp_path, monkeypatch):
    monkeypatch.setattr(PathUtils, 'get_settings_file', staticmethod(lambda: tmp_path / "absent.json"))
    manager = ConfigManager()
    try:
        manager.reset()
        assert manager.get_all() == {}
        assert manager.get_nested("fetch.timeout", 15) == 15
    finally:
        monkeypatch.undo()
        manager.reset()


def test_rule_setting_reads_rules_section(config_env):
    assert rule_setting("meta_info", "min_description_length", 10) == 25
    assert rule_setting("aria_coverage", "role_bonus_cap", 20) == 20


def test_bundled_settings_file_is_valid():
    settings = json.loads(PathUtils.get_settings_file().read_text(encoding="utf-8"))
    assert settings["fetch"]["timeout"] > 0
    assert "rules" in settings


def write_settings(monkeypatch, tmp_path, content) -> None:
    settings_file = tmp_path / "custom_settings.json"
    settings_file.write_text(json.dumps(content))
    monkeypatch.setattr(PathUtils, 'get_settings_file', staticmethod(lambda: settings_file))


def test_reset_rejects_weights_that_do_not_sum_to_one(config_env, tmp_path, monkeypatch):
    broken = dict(MOCK_SETTINGS_CONTENT, auditor={"weights": {"semantic-html": 0.5, "meta-info": 0.4}})
    write_settings(monkeypatch, tmp_path, broken)

    with pytest.raises(WeightTableError, match="sum to 1.0"):
        config_env.reset()
    # The previous configuration stays in place
    assert config_env.get_nested("rules.meta_info.min_description_length") == 25


@pytest.mark.parametrize("weights", [{}, ["semantic-html", 1.0], {"semantic-html": "heavy"}])
def test_reset_rejects_malformed_weight_tables(config_env, tmp_path, monkeypatch, weights):
    write_settings(monkeypatch, tmp_path, {"auditor": {"weights": weights}})
    with pytest.raises(WeightTableError):
        config_env.reset()


def test_reset_accepts_a_valid_weight_table(config_env, tmp_path, monkeypatch):
    weights = {"semantic-html": 0.5, "aria-coverage": 0.5}
    write_settings(monkeypatch, tmp_path, {"auditor": {"weights": weights}})
    config_env.reset()
    assert config_env.get_nested("auditor.weights") == weights


def test_reset_drops_malformed_rule_sections(config_env, tmp_path, monkeypatch):
    write_settings(monkeypatch, tmp_path, {
        "rules": {"meta_info": 40, "aria_coverage": {"role_bonus_cap": 10}}
    })
    config_env.reset()
    assert config_env.get_nested("rules.aria_coverage.role_bonus_cap") == 10
    assert "meta_info" not in config_env.get_nested("rules")
    assert rule_setting("meta_info", "min_description_length", 10) == 10


def test_reset_ignores_a_non_object_settings_file(config_env, tmp_path, monkeypatch):
    write_settings(monkeypatch, tmp_path, ["not", "an", "object"])
    config_env.reset()
    assert config_env.get_all() == {}
