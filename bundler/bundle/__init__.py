# bundler/bundle/__init__.py
from .assembler import ARTIFACT_EXTENSION, BundleArtifact, BundleAssembler, decodeArtifactBody, writeArtifact

__all__ = [
    "ARTIFACT_EXTENSION",
    "BundleArtifact",
    "BundleAssembler",
    "decodeArtifactBody",
    "writeArtifact",
]
