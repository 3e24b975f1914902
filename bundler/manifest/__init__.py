# bundler/manifest/__init__.py
from .schema import DEFAULT_REGISTRY, SchemaRegistry, SchemaRule, ValueType
from .validator import ValidationReport, Validator, Violation, ViolationKind, validateManifest
from .loader import MANIFEST_NAMES, loadManifest

__all__ = [
    "DEFAULT_REGISTRY",
    "SchemaRegistry",
    "SchemaRule",
    "ValueType",
    "ValidationReport",
    "Validator",
    "Violation",
    "ViolationKind",
    "validateManifest",
    "MANIFEST_NAMES",
    "loadManifest",
]
