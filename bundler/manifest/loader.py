# bundler/manifest/loader.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Any
from collections.abc import Iterable

import json5
import yaml

from bundler.core.errors import ManifestNotFound, ManifestParseError

logger = logging.getLogger(__name__)

__all__ = ["MANIFEST_NAMES", "findManifest", "loadManifest", "parseManifestText"]

MANIFEST_NAMES = ("manifest.yaml", "manifest.yml", "manifest.json5", "manifest.json")

_YAML_SUFFIXES = (".yaml", ".yml")
_JSON_SUFFIXES = (".json5", ".json")



def findManifest(inputRoot: Path, names: Iterable[str] = MANIFEST_NAMES) -> Path:
    """Returns the first manifest file that exists in `inputRoot`, in `names` order."""
    names = tuple(names)
    for name in names:
        candidate = inputRoot / name
        if candidate.is_file():
            return candidate
    raise ManifestNotFound(inputRoot, names)



def parseManifestText(text: str, suffix: str) -> dict[str, Any]:
    """
    Parses manifest text by file suffix (.yaml/.yml via PyYAML, .json5/.json via json5).
    Raises ManifestParseError on syntax errors or when the root is not a mapping.
    """
    suffix = suffix.lower()
    try:
        if suffix in _YAML_SUFFIXES:
            raw = yaml.safe_load(text)
        elif suffix in _JSON_SUFFIXES:
            raw = json5.loads(text)
        else:
            raise ManifestParseError(f"Unsupported manifest format '{suffix}'")
    except yaml.YAMLError as err:
        raise ManifestParseError(f"Manifest is not valid YAML: {err}") from err
    except ValueError as err:
        raise ManifestParseError(f"Manifest is not valid JSON5: {err}") from err

    if not isinstance(raw, dict):
        raise ManifestParseError(f"Manifest root must be a mapping, got {type(raw).__name__}")
    return raw



def loadManifest(inputRoot: str | Path, names: Iterable[str] = MANIFEST_NAMES) -> tuple[dict[str, Any], Path]:
    """Finds and parses the manifest. Returns (document, manifestPath)."""
    root = Path(inputRoot)
    manifestPath = findManifest(root, names)
    try:
        text = manifestPath.read_text(encoding="utf-8")
    except UnicodeDecodeError as err:
        raise ManifestParseError(f"Manifest '{manifestPath}' is not valid UTF-8: {err}") from err

    document = parseManifestText(text, manifestPath.suffix)
    logger.debug("Loaded manifest '%s' (%d top-level keys)", manifestPath, len(document))
    return document, manifestPath
