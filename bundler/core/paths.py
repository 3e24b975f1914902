# bundler/core/paths.py
from __future__ import annotations
from os import PathLike
from pathlib import Path

from bundler.core.errors import PathTraversalRejected, ReferenceNotFound

__all__ = ["resolveSafe", "readReferencedFile"]



def resolveSafe(root: str | PathLike[str], requested: str | PathLike[str] | None, *, allowSymlinks: bool = False) -> Path:
    """
    Resolves `requested` against `root` and returns the absolute path.

    Raises PathTraversalRejected when the result lies outside of root, or when
    `allowSymlinks` is off and any component between root and the target is a symlink.
    The target itself doesn't have to exist.
    """
    base = Path(root)
    baseResolved = base.resolve(strict=False)
    candidate = base / (requested or ".")
    resolved = candidate.resolve(strict=False)

    if not resolved.is_relative_to(baseResolved):
        raise PathTraversalRejected(str(requested), "path points outside of the root folder")
    if allowSymlinks or resolved == baseResolved:
        return resolved

    # Walk from root down to the target, checking each component as written
    if candidate.is_relative_to(base):
        current, parts = base, candidate.relative_to(base).parts
    else:
        current, parts = baseResolved, resolved.relative_to(baseResolved).parts
    for index, part in enumerate(parts):
        current = current / part
        if current.is_symlink():
            isLeaf = index == len(parts) - 1
            raise PathTraversalRejected(
                str(requested),
                "symlinks are not allowed" if isLeaf else "symlinked folders are not allowed",
            )
    return resolved



def readReferencedFile(root: str | PathLike[str], fileName: str, *, allowSymlinks: bool = False) -> bytes:
    """
    Raw bytes of a referenced file inside the input root.
    Raises ReferenceNotFound for a missing file (or a folder) and PathTraversalRejected for escapes.
    """
    path = resolveSafe(root, fileName, allowSymlinks=allowSymlinks)
    try:
        return path.read_bytes()
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as err:
        raise ReferenceNotFound(fileName, path) from err
