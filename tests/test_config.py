import json

import pytest

from lead_tracker.config import (
    CONFIG_ENV_VAR,
    AppConfig,
    ConfigurationError,
    load_app_config,
    load_configuration,
)


def test_load_yaml_configuration(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("user_id: me\ntimeout_seconds: 5\nuse_fallback: false\n", encoding="utf-8")

    config = load_app_config(path)

    assert config.user_id == "me"
    assert config.timeout_seconds == 5.0
    assert config.fetch_options() == {"timeout": 5.0, "use_fallback": False}
    assert config.push_options() == {"timeout": 5.0, "confirm_delivery": False}


def test_environment_variable_is_used_when_no_path(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"sync_url": "https://script.example/exec"}), encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    assert load_app_config().sync_url == "https://script.example/exec"


def test_defaults_without_configuration(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)

    config = load_app_config()

    assert config == AppConfig()
    assert config.timeout_seconds is None


def test_unknown_keys_are_ignored(caplog):
    config = AppConfig.from_mapping({"log_level": "DEBUG", "colour": "blue"})

    assert config.log_level == "DEBUG"
    assert "colour" in caplog.text


def test_empty_yaml_is_an_empty_mapping(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("", encoding="utf-8")

    assert load_configuration(path) == {}


@pytest.mark.parametrize(
    "filename, content",
    [
        ("config.toml", "user_id = 'me'"),
        ("config.json", "{not json"),
        ("config.yaml", "- a\n- b\n"),
    ],
)
def test_invalid_configuration(tmp_path, filename, content):
    path = tmp_path / filename
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_configuration(path)


def test_missing_configuration_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_configuration(tmp_path / "absent.yaml")


def test_non_numeric_timeout():
    with pytest.raises(ConfigurationError):
        AppConfig.from_mapping({"timeout_seconds": "soon"})
