# bundler/manifest/validator.py
from __future__ import annotations
import logging
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from collections.abc import Mapping, Sequence

from bundler.manifest.schema import DEFAULT_REGISTRY, ROOT_LEVEL, SchemaRegistry, SchemaRule, ValueType

logger = logging.getLogger(__name__)

__all__ = [
    "ViolationKind",
    "Violation",
    "ValidationReport",
    "Validator",
    "checkValue",
    "parseDecimal",
    "validateManifest",
]

# Leading number of a string, the way a version like "1.0.0" is read as 1.0
_DECIMAL_PREFIX_RE = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")



class ViolationKind(str, Enum):
    KEY_NOT_ALLOWED = "keyNotAllowed"
    REQUIRED_KEY_MISSING = "requiredKeyMissing"
    WRONG_TYPE = "wrongType"
    OUT_OF_RANGE = "outOfRange"
    TOO_LONG = "tooLong"



@dataclass(frozen=True, slots=True)
class Violation:
    path: str           # Where in the manifest, e.g. "menus[0].entries[1]"
    key: str | None     # Offending key, None when the object itself is wrong
    kind: ViolationKind
    message: str

    def __str__(self) -> str:
        return f"Error in {self.path}: {self.message}"



@dataclass
class ValidationReport:
    violations: list[Violation] = field(default_factory=list)

    @property
    def errorCount(self) -> int:
        return len(self.violations)

    @property
    def ok(self) -> bool:
        return not self.violations

    def extend(self, violations: list[Violation]) -> None:
        self.violations.extend(violations)



def parseDecimal(value: Any) -> float | None:
    """
    Returns the value as a finite float, or None when it is not a number.

    Strings are read up to the end of their leading number, so "1.0.0" and
    "1.2-beta" are 1.0 and 1.2. Zero is a perfectly good decimal.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _DECIMAL_PREFIX_RE.match(value)
        if match is None:
            return None
        number = float(match.group(0))
    else:
        return None
    return number if math.isfinite(number) else None



def _isWholeNumber(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, int)



def _isSequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))



def _rangeMessage(value: Any, rule: SchemaRule) -> str:
    upper = rule.max if rule.max is not None else "unbounded"
    return f"{value} was not in the allowed range of {rule.min} to {upper}"



def _outOfRange(number: float | int, rule: SchemaRule) -> bool:
    if rule.min is not None and number < rule.min:
        return True
    if rule.max is not None and number > rule.max:
        return True
    return False



def checkValue(value: Any, rule: SchemaRule, *, path: str = ROOT_LEVEL) -> list[Violation]:
    """
    Checks a single value against its rule: type first, then bounds.
    Returns the violations found (empty list when valid).
    """
    where = f"{rule.name} of {path}"

    def fail(kind: ViolationKind, message: str) -> list[Violation]:
        return [Violation(path=where, key=rule.name, kind=kind, message=message)]

    if rule.type == ValueType.BOOLEAN:
        if value is not True and value is not False:
            return fail(ViolationKind.WRONG_TYPE, f"boolean expected, but got {value!r}")

    elif rule.type == ValueType.INTEGER:
        if not _isWholeNumber(value):
            return fail(ViolationKind.WRONG_TYPE, f"int expected, but got {value!r}")
        if _outOfRange(value, rule):
            return fail(ViolationKind.OUT_OF_RANGE, _rangeMessage(value, rule))

    elif rule.type == ValueType.DECIMAL:
        number = parseDecimal(value)
        if number is None:
            return fail(ViolationKind.WRONG_TYPE, f"decimal expected, but got {value!r}")
        if _outOfRange(number, rule):
            return fail(ViolationKind.OUT_OF_RANGE, _rangeMessage(value, rule))

    elif rule.type == ValueType.STRING:
        if not isinstance(value, str):
            return fail(ViolationKind.WRONG_TYPE, f"string expected, but got {value!r}")
        # No max means any length goes
        if rule.max is not None and len(value) > rule.max:
            return fail(
                ViolationKind.TOO_LONG,
                f"the string is too long - it must be at most {rule.max} characters",
            )

    elif rule.type == ValueType.ARRAY:
        # Items are checked by the caller when the rule has a nested level
        if not _isSequence(value):
            return fail(ViolationKind.WRONG_TYPE, f"list expected, but got {value!r}")

    return []



class Validator:
    """
    Walks a manifest against a SchemaRegistry and collects every violation.

    Never stops at the first problem: the author gets the full list in one run.
    Pure with respect to the document; nothing is mutated.
    """
    def __init__(self, registry: SchemaRegistry = DEFAULT_REGISTRY):
        self.registry = registry

    def validate(self, document: Any) -> ValidationReport:
        report = ValidationReport()
        report.extend(self._checkObject(document, ROOT_LEVEL, ROOT_LEVEL))
        for violation in report.violations:
            logger.error("%s", violation)
        logger.debug("Manifest validated against schema %s: %d error(s)", self.registry.version, report.errorCount)
        return report

    def _checkObject(self, obj: Any, level: str, path: str) -> list[Violation]:
        if not isinstance(obj, Mapping):
            return [Violation(
                path=path,
                key=None,
                kind=ViolationKind.WRONG_TYPE,
                message=f"object expected, but got {obj!r}",
            )]

        violations: list[Violation] = []

        # Every key must be known, and its value must fit its rule
        for key, value in obj.items():
            rule = self.registry.ruleFor(level, key) if isinstance(key, str) else None
            if rule is None:
                violations.append(Violation(
                    path=path,
                    key=str(key),
                    kind=ViolationKind.KEY_NOT_ALLOWED,
                    message=f"Key {key} is not allowed",
                ))
                continue

            violations.extend(checkValue(value, rule, path=path))

            if rule.nested is not None and _isSequence(value):
                for idx, item in enumerate(value):
                    violations.extend(self._checkObject(item, rule.nested, f"{_childPath(path, key)}[{idx}]"))

        # Presence only: an explicit empty value still counts as present
        for name in self.registry.requiredNames(level):
            if name not in obj:
                violations.append(Violation(
                    path=path,
                    key=name,
                    kind=ViolationKind.REQUIRED_KEY_MISSING,
                    message=f"Required key {name} not found",
                ))

        return violations



def _childPath(path: str, key: str) -> str:
    return key if path == ROOT_LEVEL else f"{path}.{key}"



def validateManifest(document: Any, registry: SchemaRegistry = DEFAULT_REGISTRY) -> ValidationReport:
    return Validator(registry).validate(document)
