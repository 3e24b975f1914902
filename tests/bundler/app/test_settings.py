# tests/bundler/app/test_settings.py
import logging
from pathlib import Path

import pytest

from bundler.app.settings import (
    BundlerSettings,
    deepMerge,
    loadSettings,
    loadSettingsFile,
    loadUserSettings,
    settingsFromEnv,
)
from bundler.core.errors import ConfigError
from bundler.manifest.loader import MANIFEST_NAMES


def _load(**kwargs) -> BundlerSettings:
    kwargs.setdefault("env", {})
    kwargs.setdefault("userSettingsPath", None)
    return loadSettings(**kwargs)


def test_defaults():
    settings = _load()
    assert settings.inputRoot == Path(".")
    assert settings.outputRoot == Path(".")
    assert settings.noMinify is False
    assert settings.manifestNames == list(MANIFEST_NAMES)
    assert settings.artifactExtension == "spiraapp"
    assert settings.logging.devMode is False
    assert settings.logging.file is None


def test_cli_overrides_win():
    settings = _load(
        cliOverrides={"inputRoot": "src", "outputRoot": "dist"},
        env={"SPIRAAPP_INPUT": "from-env", "SPIRAAPP_OUTPUT": "from-env"},
    )
    assert settings.inputRoot == Path("src")
    assert settings.outputRoot == Path("dist")


def test_env_variables():
    settings = _load(env={"SPIRAAPP_INPUT": "in", "SPIRAAPP_OUTPUT": "out"})
    assert (settings.inputRoot, settings.outputRoot) == (Path("in"), Path("out"))


def test_npm_variables():
    settings = _load(env={"npm_config_input": "./app", "npm_config_output": "./build", "npm_config_debug": "true"})
    assert settings.inputRoot == Path("app")
    assert settings.outputRoot == Path("build")
    assert settings.noMinify is True
    assert settings.logging.devMode is True


def test_spiraapp_variables_win_over_npm():
    env = {"SPIRAAPP_INPUT": "a", "npm_config_input": "b", "SPIRAAPP_DEBUG": "0", "npm_config_debug": "true"}
    settings = _load(env=env)
    assert settings.inputRoot == Path("a")
    assert settings.noMinify is False


@pytest.mark.parametrize("value, debug", [("1", True), ("TRUE", True), (" yes ", True), ("off", False), ("", False)])
def test_spiraapp_debug_values(value, debug):
    assert ("noMinify" in settingsFromEnv({"SPIRAAPP_DEBUG": value})) is debug


def test_empty_env_gives_nothing():
    assert settingsFromEnv({}) == {}


def test_debug_flag_expands():
    settings = _load(cliOverrides={"debug": True})
    assert settings.noMinify is True
    assert settings.logging.devMode is True


def test_debug_false_changes_nothing():
    settings = _load(cliOverrides={"debug": False})
    assert settings.noMinify is False


def test_config_file(tmp_path):
    path = tmp_path / "bundler.json5"
    path.write_text("{\n  // comments are fine\n  inputRoot: 'src',\n  logging: {file: 'bundle.log'},\n}\n", encoding="utf-8")
    settings = _load(configPath=path)
    assert settings.inputRoot == Path("src")
    assert settings.logging.file == Path("bundle.log")
    assert settings.logging.devMode is False


def test_env_wins_over_config_file(tmp_path):
    path = tmp_path / "bundler.json5"
    path.write_text("{inputRoot: 'from-file', outputRoot: 'kept'}", encoding="utf-8")
    settings = _load(configPath=path, env={"SPIRAAPP_INPUT": "from-env"})
    assert settings.inputRoot == Path("from-env")
    assert settings.outputRoot == Path("kept")


def test_config_file_debug(tmp_path):
    path = tmp_path / "bundler.json5"
    path.write_text("{debug: true}", encoding="utf-8")
    assert loadSettingsFile(path) == {"noMinify": True, "logging": {"devMode": True}}


@pytest.mark.parametrize("content", [
    "{colour: 'blue'}",
    "{noMinify: 'yes'}",
    "{manifestNames: []}",
    "{artifactExtension: 'spira.app'}",
    "{logging: {level: 'debug'}}",
    "[1, 2]",
])
def test_config_file_shape_is_checked(tmp_path, content):
    path = tmp_path / "bundler.json5"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid settings"):
        loadSettingsFile(path)


def test_config_file_parse_error(tmp_path):
    path = tmp_path / "bundler.json5"
    path.write_text("{inputRoot: ", encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed to parse"):
        loadSettingsFile(path)


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        _load(configPath=tmp_path / "nope.json5")


def test_user_settings_are_the_lowest_layer(tmp_path):
    user = tmp_path / "user.json5"
    user.write_text("{outputRoot: 'user-out', noMinify: true}", encoding="utf-8")
    settings = _load(userSettingsPath=user, cliOverrides={"outputRoot": "cli-out"})
    assert settings.outputRoot == Path("cli-out")
    assert settings.noMinify is True


def test_missing_user_settings_are_fine(tmp_path):
    assert loadUserSettings(tmp_path / "absent.json5") == {}


def test_broken_user_settings_are_ignored(tmp_path, caplog):
    user = tmp_path / "user.json5"
    user.write_text("{nope: 1}", encoding="utf-8")
    with caplog.at_level(logging.ERROR, logger="bundler.app.settings"):
        settings = _load(userSettingsPath=user)
    assert settings == _load()
    assert "Ignoring user settings" in caplog.text


def test_bad_cli_override_is_a_config_error():
    with pytest.raises(ConfigError):
        _load(cliOverrides={"artifactExtension": "a/b"})
    with pytest.raises(ConfigError):
        _load(cliOverrides={"unknown": 1})


def test_deep_merge():
    left = {"a": 1, "nested": {"x": 1, "y": 2}, "list": [1, 2]}
    right = {"nested": {"y": 3}, "list": [9]}
    assert deepMerge(left, right) == {"a": 1, "nested": {"x": 1, "y": 3}, "list": [9]}
    assert left == {"a": 1, "nested": {"x": 1, "y": 2}, "list": [1, 2]}
