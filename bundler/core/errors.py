# bundler/core/errors.py
from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bundler.manifest.validator import ValidationReport

__all__ = [
    "BundlerError",
    "ConfigError",
    "ManifestNotFound",
    "ManifestParseError",
    "ManifestValidationError",
    "BundleReferenceError",
    "ReferenceNotFound",
    "PathTraversalRejected",
    "ReferenceCycleError",
    "ReferenceDecodeError",
    "MinifyError",
]



class BundlerError(Exception):
    """Base class for everything the bundler raises on purpose."""
    pass



class ConfigError(BundlerError):
    """Raised when a settings file or override cannot be turned into BundlerSettings."""
    pass



class ManifestNotFound(BundlerError):
    def __init__(self, inputRoot: object, names: tuple[str, ...] | list[str]):
        self.inputRoot = inputRoot
        self.names = tuple(names)
        super().__init__(f"No manifest file found in '{inputRoot}' (looked for {', '.join(self.names)})")



class ManifestParseError(BundlerError):
    pass



class ManifestValidationError(BundlerError):
    """
    Raised by the assembler when the manifest has one or more schema violations.
    Carries the complete report so the caller can print every problem in one go.
    """
    def __init__(self, report: ValidationReport):
        self.report = report
        super().__init__(f"Manifest has {report.errorCount} error(s)")



class BundleReferenceError(BundlerError):
    """Base for failures while inlining a `file://` reference. Always fatal for the bundle."""
    def __init__(self, fileName: str, message: str):
        self.fileName = fileName
        super().__init__(message)



class ReferenceNotFound(BundleReferenceError):
    def __init__(self, fileName: str, path: object | None = None):
        self.path = path
        where = f" (looked at '{path}')" if path is not None else ""
        super().__init__(fileName, f"Referenced file '{fileName}' not found{where}")



class PathTraversalRejected(BundleReferenceError):
    def __init__(self, fileName: str, reason: str = "references must be bare file names inside the input folder"):
        self.reason = reason
        super().__init__(fileName, f"Reference 'file://{fileName}' rejected: {reason}")



class ReferenceCycleError(BundleReferenceError):
    def __init__(self, fileName: str, chain: tuple[str, ...] | list[str]):
        self.chain = tuple(chain)
        super().__init__(fileName, "Reference cycle detected: " + " -> ".join([*self.chain, fileName]))



class ReferenceDecodeError(BundleReferenceError):
    def __init__(self, fileName: str, err: UnicodeDecodeError):
        super().__init__(fileName, f"Referenced file '{fileName}' is not valid UTF-8 text: {err}")



class MinifyError(BundlerError):
    """Raised by the script minifier. Callers fall back to the unminified text."""
    pass
