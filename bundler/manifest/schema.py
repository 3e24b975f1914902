# bundler/manifest/schema.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from collections.abc import Mapping

__all__ = [
    "SCHEMA_VERSION",
    "PAGE_ID_MIN",
    "PAGE_ID_MAX",
    "DASHBOARD_TYPE_ID_MIN",
    "DASHBOARD_TYPE_ID_MAX",
    "SETTING_TYPE_ID_MIN",
    "SETTING_TYPE_ID_MAX",
    "ACTION_TYPE_ID_MIN",
    "ACTION_TYPE_ID_MAX",
    "ROOT_LEVEL",
    "ValueType",
    "SchemaRule",
    "SchemaRegistry",
    "DEFAULT_REGISTRY",
]



# Bumping any of these is a schema change: bump SCHEMA_VERSION with it.
SCHEMA_VERSION = "1.0"

PAGE_ID_MIN = 1
PAGE_ID_MAX = 21
DASHBOARD_TYPE_ID_MIN = 1
DASHBOARD_TYPE_ID_MAX = 6
SETTING_TYPE_ID_MIN = 1
SETTING_TYPE_ID_MAX = 12
ACTION_TYPE_ID_MIN = 1
ACTION_TYPE_ID_MAX = 2

ROOT_LEVEL = "root"



class ValueType(str, Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    DECIMAL = "decimal"
    STRING = "string"
    ARRAY = "array"



@dataclass(frozen=True, slots=True)
class SchemaRule:
    """
    One accepted key of a manifest object.
    - min/max: numeric bounds for integer/decimal; max is the length limit for strings.
      None means unbounded.
    - nested: for arrays, the level whose rules apply to every item.
    """
    name: str
    required: bool
    type: ValueType
    min: int | float | None = None
    max: int | float | None = None
    nested: str | None = None



def _string(name: str, max: int | None, *, required: bool = False) -> SchemaRule:
    return SchemaRule(name=name, required=required, type=ValueType.STRING, max=max)

def _integer(name: str, min: int, max: int | None, *, required: bool = False) -> SchemaRule:
    return SchemaRule(name=name, required=required, type=ValueType.INTEGER, min=min, max=max)

def _boolean(name: str) -> SchemaRule:
    return SchemaRule(name=name, required=False, type=ValueType.BOOLEAN)

def _array(name: str, nested: str | None = None) -> SchemaRule:
    return SchemaRule(name=name, required=False, type=ValueType.ARRAY, nested=nested)



_SETTING_RULES: tuple[SchemaRule, ...] = (
    _integer("settingTypeId", SETTING_TYPE_ID_MIN, SETTING_TYPE_ID_MAX, required=True),
    _string("name", 255, required=True),
    _string("caption", 50, required=True),
    _string("placeholder", 255),
    _string("tooltip", 255),
    _boolean("isSecure"),
    _integer("position", 1, None),
    _string("settingGroup", 50),
)

_DEFAULT_TABLES: dict[str, tuple[SchemaRule, ...]] = {
    ROOT_LEVEL: (
        _string("guid", 64, required=True),
        _string("name", 255, required=True),
        _string("caption", 255),
        _string("summary", 255),
        _string("description", None),
        _string("productSummary", 255),
        _string("productDescription", None),
        _string("author", 128),
        _string("license", None),
        _string("copyright", 128),
        _string("url", 256),
        _string("icon", None),
        SchemaRule(name="version", required=True, type=ValueType.DECIMAL, min=0),
        _array("menus", "menu"),
        _array("pageContents", "pageContent"),
        _array("pageColumns", "pageColumn"),
        _array("dashboards", "dashboard"),
        _array("settingGroups", "settingGroup"),
        _array("settings", "setting"),
        _array("productSettings", "productSetting"),
    ),
    "menu": (
        _integer("pageId", PAGE_ID_MIN, PAGE_ID_MAX, required=True),
        _string("caption", 255, required=True),
        _string("icon", 255),
        _boolean("isActive"),
        _array("entries", "menuEntry"),
    ),
    "menuEntry": (
        _string("name", 50, required=True),
        _string("caption", 128, required=True),
        _string("tooltip", 255),
        _string("icon", 255),
        _integer("actionTypeId", ACTION_TYPE_ID_MIN, ACTION_TYPE_ID_MAX, required=True),
        _string("action", 255, required=True),
        _boolean("isActive"),
    ),
    "pageContent": (
        _integer("pageId", PAGE_ID_MIN, PAGE_ID_MAX, required=True),
        _string("name", 128, required=True),
        _string("code", None, required=True),
        _string("css", None),
    ),
    "pageColumn": (
        _integer("pageId", PAGE_ID_MIN, PAGE_ID_MAX, required=True),
        _string("name", 50, required=True),
        _string("caption", 50, required=True),
        _string("template", None, required=True),
    ),
    "dashboard": (
        _integer("dashboardTypeId", DASHBOARD_TYPE_ID_MIN, DASHBOARD_TYPE_ID_MAX),
        _string("name", 128, required=True),
        _boolean("isActive"),
        _string("description", None),
        _string("code", None),
    ),
    "settingGroup": (
        _string("name", 50, required=True),
        _string("caption", 255, required=True),
        _string("description", None),
    ),
    "setting": _SETTING_RULES,
    "productSetting": _SETTING_RULES + (
        _integer("artifactTypeId", -1000, None),
    ),
}



class SchemaRegistry:
    """
    Immutable, versioned rule tables describing every nesting level of a manifest.

    Built once (usually DEFAULT_REGISTRY) and passed to the Validator. Tables are
    frozen on construction, so a registry can be shared freely.
    """
    def __init__(self, tables: Mapping[str, tuple[SchemaRule, ...] | list[SchemaRule]] | None = None, *, version: str = SCHEMA_VERSION):
        source = _DEFAULT_TABLES if tables is None else tables
        if ROOT_LEVEL not in source:
            raise ValueError(f"Schema tables must define the '{ROOT_LEVEL}' level")

        frozenTables: dict[str, tuple[SchemaRule, ...]] = {}
        for level, rules in source.items():
            rules = tuple(rules)
            names = [rule.name for rule in rules]
            if len(names) != len(set(names)):
                raise ValueError(f"Duplicate rule names in level '{level}'")
            frozenTables[level] = rules

        # Nested levels must exist, otherwise the validator would silently skip them
        for level, rules in frozenTables.items():
            for rule in rules:
                if rule.nested is not None and rule.nested not in frozenTables:
                    raise ValueError(f"Rule '{level}.{rule.name}' points to unknown level '{rule.nested}'")

        self._version = version
        self._tables: Mapping[str, tuple[SchemaRule, ...]] = MappingProxyType(frozenTables)
        self._byName: Mapping[str, Mapping[str, SchemaRule]] = MappingProxyType({
            level: MappingProxyType({rule.name: rule for rule in rules}) for level, rules in frozenTables.items()
        })

    @property
    def version(self) -> str:
        return self._version

    def levels(self) -> list[str]:
        return list(self._tables.keys())

    def rulesFor(self, level: str) -> tuple[SchemaRule, ...]:
        if level not in self._tables:
            raise KeyError(f"Unknown schema level '{level}'")
        return self._tables[level]

    def ruleFor(self, level: str, name: str) -> SchemaRule | None:
        if level not in self._byName:
            raise KeyError(f"Unknown schema level '{level}'")
        return self._byName[level].get(name)

    def fieldNames(self, level: str) -> list[str]:
        return [rule.name for rule in self.rulesFor(level)]

    def requiredNames(self, level: str) -> list[str]:
        return [rule.name for rule in self.rulesFor(level) if rule.required]



DEFAULT_REGISTRY = SchemaRegistry()
