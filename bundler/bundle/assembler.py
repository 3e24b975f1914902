# bundler/bundle/assembler.py
from __future__ import annotations
import base64
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from collections.abc import Mapping

from bundler.core.errors import BundlerError, ManifestValidationError
from bundler.core.jsonutils import safeJsonDumps
from bundler.core.logging import setLogContext
from bundler.core.paths import resolveSafe
from bundler.manifest.schema import DEFAULT_REGISTRY, SchemaRegistry
from bundler.manifest.validator import ValidationReport, Validator
from bundler.resolve.resolver import ReferenceResolver

logger = logging.getLogger(__name__)

__all__ = [
    "ARTIFACT_EXTENSION",
    "BundleArtifact",
    "BundleAssembler",
    "decodeArtifactBody",
    "writeArtifact",
]

ARTIFACT_EXTENSION = "spiraapp"



@dataclass(frozen=True, slots=True)
class BundleArtifact:
    """
    The finished bundle, ready to be written.
    """
    guid: str           # Manifest guid, also the file stem
    displayName: str    # Manifest name, for messages only
    fileName: str       # "<guid>.<extension>"
    body: str           # base64 of the fully resolved JSON manifest



@dataclass
class BundleAssembler:
    """
    Validates a manifest, inlines every referenced file and encodes the result.

    Nothing is produced unless the manifest has zero violations and every
    reference resolves.
    """
    resolver: ReferenceResolver
    registry: SchemaRegistry = DEFAULT_REGISTRY
    artifactExtension: str = ARTIFACT_EXTENSION

    def __post_init__(self) -> None:
        self._validator = Validator(self.registry)

    def validate(self, document: Any) -> ValidationReport:
        return self._validator.validate(document)

    def assemble(self, document: Mapping[str, Any]) -> BundleArtifact:
        """
        Returns the BundleArtifact for `document`.
        Raises ManifestValidationError (with the full report) when the manifest has errors,
        and lets resolution errors (missing file, rejected path, cycle) propagate.
        """
        report = self.validate(document)
        if not report.ok:
            raise ManifestValidationError(report)

        guid = str(document["guid"])
        displayName = str(document["name"])
        setLogContext(bundle=displayName)

        withIcons = self.resolver.resolveIconFields(document)
        text = safeJsonDumps(withIcons)
        resolved = self.resolver.resolveAll(text, None)

        body = base64.b64encode(resolved.encode("utf-8")).decode("ascii")
        logger.debug("Assembled '%s': %d chars of JSON, %d chars encoded", displayName, len(resolved), len(body))
        return BundleArtifact(
            guid=guid,
            displayName=displayName,
            fileName=f"{guid}.{self.artifactExtension}",
            body=body,
        )



def decodeArtifactBody(body: str) -> str:
    """Inverse of the final encoding step: returns the resolved JSON text."""
    return base64.b64decode(body.encode("ascii"), validate=True).decode("utf-8")



def writeArtifact(artifact: BundleArtifact, outputRoot: str | Path, *, allowSymlinks: bool = False) -> Path:
    """
    Writes the artifact into `outputRoot` (created if missing) and returns its path.
    A guid that would place the file outside of `outputRoot` is rejected.
    """
    root = Path(outputRoot)
    root.mkdir(parents=True, exist_ok=True)
    target = resolveSafe(root, artifact.fileName, allowSymlinks=allowSymlinks)
    if target.parent != root.resolve():
        raise BundlerError(f"Artifact name '{artifact.fileName}' must not contain folders")
    target.write_text(artifact.body, encoding="ascii")
    return target
