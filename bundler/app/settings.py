# bundler/app/settings.py
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any, cast
from collections.abc import Mapping

import fastjsonschema
import json5
from pydantic import BaseModel, ConfigDict, Field, JsonValue, ValidationError

from bundler.bundle.assembler import ARTIFACT_EXTENSION
from bundler.core.errors import ConfigError
from bundler.manifest.loader import MANIFEST_NAMES

logger = logging.getLogger(__name__)

__all__ = [
    "SETTINGS_DEFAULTS",
    "USER_SETTINGS_PATH",
    "CONFIG_FILE_SCHEMA",
    "LoggingSettings",
    "BundlerSettings",
    "deepMerge",
    "loadSettingsFile",
    "loadUserSettings",
    "settingsFromEnv",
    "loadSettings",
]



SETTINGS_DEFAULTS: dict[str, JsonValue] = {
    "inputRoot": ".",
    "outputRoot": ".",
    "noMinify": False,
    "manifestNames": list(MANIFEST_NAMES),
    "artifactExtension": ARTIFACT_EXTENSION,
    "allowSymlinks": False,
    "logging": {"devMode": False, "file": None},
}

USER_SETTINGS_PATH = Path("~/.spiraapp/bundler.json5")

# Shape of a json5 settings file. Everything is optional; unknown keys are typos.
CONFIG_FILE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "inputRoot": {"type": "string", "minLength": 1},
        "outputRoot": {"type": "string", "minLength": 1},
        "noMinify": {"type": "boolean"},
        "debug": {"type": "boolean"},
        "manifestNames": {"type": "array", "items": {"type": "string", "minLength": 1}, "minItems": 1},
        "artifactExtension": {"type": "string", "pattern": "^[A-Za-z0-9]+$"},
        "allowSymlinks": {"type": "boolean"},
        "logging": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "devMode": {"type": "boolean"},
                "file": {"type": ["string", "null"]},
            },
        },
    },
}

_validateConfigFile = fastjsonschema.compile(CONFIG_FILE_SCHEMA)

_TRUTHY = {"1", "true", "yes", "on"}



class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    devMode: bool = False
    file: Path | None = None



class BundlerSettings(BaseModel):
    """Merged, validated settings for one bundler run."""
    model_config = ConfigDict(extra="forbid")

    inputRoot: Path = Path(".")
    outputRoot: Path = Path(".")
    noMinify: bool = False
    manifestNames: list[str] = Field(default_factory=lambda: list(MANIFEST_NAMES), min_length=1)
    artifactExtension: str = Field(default=ARTIFACT_EXTENSION, pattern=r"^[A-Za-z0-9]+$")
    allowSymlinks: bool = False
    logging: LoggingSettings = Field(default_factory=LoggingSettings)



def deepMerge(base: JsonValue, overlay: JsonValue) -> JsonValue:
    """
    Layers `overlay` on top of `base` without touching either.
    Objects merge key by key (recursively); any other value in `overlay`, lists
    included, simply wins.
    """
    if not (isinstance(base, dict) and isinstance(overlay, dict)):
        return overlay
    merged: dict[str, JsonValue] = dict(base)
    for key, value in overlay.items():
        merged[key] = deepMerge(merged[key], value) if key in merged else value
    return merged



def _expandDebug(data: dict[str, Any]) -> dict[str, Any]:
    """`debug: true` is shorthand for no minification plus dev logging."""
    if "debug" not in data:
        return data
    data = dict(data)
    debug = bool(data.pop("debug"))
    if debug:
        data = cast(dict[str, Any], deepMerge(data, {"noMinify": True, "logging": {"devMode": True}}))
    return data



def loadSettingsFile(path: str | Path) -> dict[str, Any]:
    """
    Reads a json5 settings file and checks it against CONFIG_FILE_SCHEMA.
    Raises ConfigError when the file is missing, unparsable or has the wrong shape.
    """
    filePath = Path(path).expanduser()
    try:
        raw = json5.loads(filePath.read_text(encoding="utf-8"))
    except FileNotFoundError as err:
        raise ConfigError(f"Settings file '{filePath}' not found") from err
    except ValueError as err:
        raise ConfigError(f"Failed to parse '{filePath}': {err}") from err

    try:
        _validateConfigFile(raw)
    except fastjsonschema.JsonSchemaValueException as err:
        raise ConfigError(f"Invalid settings in '{filePath}': {err.message}") from err

    return _expandDebug(raw)



def loadUserSettings(path: str | Path = USER_SETTINGS_PATH) -> dict[str, Any]:
    """Per-user defaults. A broken file is reported and ignored."""
    filePath = Path(path).expanduser()
    if not filePath.exists():
        return {}
    try:
        return loadSettingsFile(filePath)
    except ConfigError as err:
        logger.error("Ignoring user settings: %s", err)
        return {}



def settingsFromEnv(env: Mapping[str, str]) -> dict[str, Any]:
    """
    Settings from environment variables.

    SPIRAAPP_INPUT / SPIRAAPP_OUTPUT / SPIRAAPP_DEBUG, plus the npm style
    npm_config_input / npm_config_output / npm_config_debug that
    `npm run build --input=... --output=... --debug` sets. SPIRAAPP_* wins.
    """
    out: dict[str, Any] = {}

    inputRoot = env.get("SPIRAAPP_INPUT") or env.get("npm_config_input")
    if inputRoot:
        out["inputRoot"] = inputRoot

    outputRoot = env.get("SPIRAAPP_OUTPUT") or env.get("npm_config_output")
    if outputRoot:
        out["outputRoot"] = outputRoot

    if "SPIRAAPP_DEBUG" in env:
        debug = env["SPIRAAPP_DEBUG"].strip().lower() in _TRUTHY
    else:
        # npm sets the flag to "true"; any non-empty value counts
        debug = bool(env.get("npm_config_debug"))
    if debug:
        out["debug"] = True

    return _expandDebug(out)



def loadSettings(
        *,
        cliOverrides: Mapping[str, Any] | None = None,
        configPath: str | Path | None = None,
        env: Mapping[str, str] | None = None,
        userSettingsPath: str | Path | None = USER_SETTINGS_PATH,
) -> BundlerSettings:
    """
    Builds BundlerSettings from, lowest priority first:
      defaults → user file → explicit config file → environment → CLI overrides
    """
    merged: JsonValue = dict(SETTINGS_DEFAULTS)
    if userSettingsPath is not None:
        merged = deepMerge(merged, loadUserSettings(userSettingsPath))
    if configPath is not None:
        merged = deepMerge(merged, loadSettingsFile(configPath))
    merged = deepMerge(merged, settingsFromEnv(os.environ if env is None else env))
    if cliOverrides:
        merged = deepMerge(merged, _expandDebug(dict(cliOverrides)))

    try:
        return BundlerSettings.model_validate(merged)
    except ValidationError as err:
        raise ConfigError(f"Invalid bundler settings: {err}") from err
