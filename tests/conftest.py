import sys
import copy
from pathlib import Path
from typing import Any, Callable

import pytest

from bundler.core.logging import clearLogContext



VALID_MANIFEST: dict[str, Any] = {
    "guid": "3f2a1b7c-0d4e-4f5a-9b8c-7d6e5f4a3b2c",
    "name": "Release Notes Helper",
    "caption": "Release notes",
    "version": 1.2,
    "author": "Inflectra",
    "menus": [
        {
            "pageId": 9,
            "caption": "Notes",
            "isActive": True,
            "entries": [
                {
                    "name": "generate",
                    "caption": "Generate notes",
                    "actionTypeId": 2,
                    "action": "generateNotes",
                },
            ],
        },
    ],
    "pageContents": [
        {"pageId": 9, "name": "notes", "code": "console.log('notes');"},
    ],
    "settingGroups": [
        {"name": "main", "caption": "Main settings"},
    ],
    "settings": [
        {"settingTypeId": 1, "name": "token", "caption": "API token", "isSecure": True, "settingGroup": "main"},
    ],
    "productSettings": [
        {"settingTypeId": 3, "name": "format", "caption": "Format", "artifactTypeId": -3},
    ],
}



def pytest_configure(config: pytest.Config) -> None:
    if sys.flags.optimize:
        raise RuntimeError("Assertions are disabled (optimize > 0)")



@pytest.fixture(autouse=True)
def _cleanLogContext():
    yield
    clearLogContext()



@pytest.fixture()
def validManifest() -> dict[str, Any]:
    return copy.deepcopy(VALID_MANIFEST)



@pytest.fixture()
def bundleRoot(tmp_path: Path) -> Callable[..., Path]:
    """
    Returns a writer: bundleRoot({name: content}) creates <tmp>/input with the given files
    (str → utf-8 text, bytes → as-is) and returns the folder.
    """
    root = tmp_path / "input"
    root.mkdir()

    def write(files: dict[str, str | bytes] | None = None) -> Path:
        for name, content in (files or {}).items():
            path = root / name
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return root

    return write
