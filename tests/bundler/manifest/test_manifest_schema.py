# tests/bundler/manifest/test_manifest_schema.py
import dataclasses

import pytest

from bundler.manifest.schema import (
    DEFAULT_REGISTRY,
    PAGE_ID_MAX,
    PAGE_ID_MIN,
    SETTING_TYPE_ID_MAX,
    SchemaRegistry,
    SchemaRule,
    ValueType,
)


def test_default_registry_has_every_level():
    assert set(DEFAULT_REGISTRY.levels()) == {
        "root", "menu", "menuEntry", "pageContent", "pageColumn",
        "dashboard", "settingGroup", "setting", "productSetting",
    }


def test_root_required_fields():
    assert DEFAULT_REGISTRY.requiredNames("root") == ["guid", "name", "version"]


def test_rules_keep_declared_order():
    assert DEFAULT_REGISTRY.fieldNames("pageColumn") == ["pageId", "name", "caption", "template"]


def test_nested_levels_are_declared_on_array_rules():
    menus = DEFAULT_REGISTRY.ruleFor("root", "menus")
    entries = DEFAULT_REGISTRY.ruleFor("menu", "entries")
    assert menus is not None and menus.type == ValueType.ARRAY and menus.nested == "menu"
    assert entries is not None and entries.nested == "menuEntry"


def test_page_id_bounds_come_from_the_constants():
    rule = DEFAULT_REGISTRY.ruleFor("pageContent", "pageId")
    assert rule is not None
    assert (rule.min, rule.max) == (PAGE_ID_MIN, PAGE_ID_MAX)


def test_product_setting_extends_setting():
    settingNames = DEFAULT_REGISTRY.fieldNames("setting")
    productNames = DEFAULT_REGISTRY.fieldNames("productSetting")
    assert productNames[: len(settingNames)] == settingNames
    assert productNames[-1] == "artifactTypeId"
    artifactType = DEFAULT_REGISTRY.ruleFor("productSetting", "artifactTypeId")
    assert artifactType is not None and artifactType.min == -1000 and artifactType.max is None
    settingType = DEFAULT_REGISTRY.ruleFor("productSetting", "settingTypeId")
    assert settingType is not None and settingType.max == SETTING_TYPE_ID_MAX


def test_unbounded_strings_have_no_max():
    rule = DEFAULT_REGISTRY.ruleFor("root", "description")
    assert rule is not None and rule.max is None


def test_unknown_level_raises():
    with pytest.raises(KeyError):
        DEFAULT_REGISTRY.rulesFor("widgets")
    with pytest.raises(KeyError):
        DEFAULT_REGISTRY.ruleFor("widgets", "name")


def test_unknown_rule_is_none():
    assert DEFAULT_REGISTRY.ruleFor("root", "nope") is None


def test_rules_are_immutable():
    rule = DEFAULT_REGISTRY.rulesFor("root")[0]
    with pytest.raises(dataclasses.FrozenInstanceError):
        rule.max = 1  # type: ignore[misc]
    assert isinstance(DEFAULT_REGISTRY.rulesFor("root"), tuple)


def test_registry_is_not_affected_by_caller_mutating_source_tables():
    rules = [SchemaRule(name="guid", required=True, type=ValueType.STRING, max=8)]
    tables = {"root": rules}
    registry = SchemaRegistry(tables)
    rules.append(SchemaRule(name="extra", required=False, type=ValueType.STRING))
    tables["other"] = []
    assert registry.fieldNames("root") == ["guid"]
    assert registry.levels() == ["root"]


def test_custom_tables_are_checked():
    with pytest.raises(ValueError):
        SchemaRegistry({"menu": ()})
    with pytest.raises(ValueError):
        SchemaRegistry({"root": (SchemaRule("a", False, ValueType.ARRAY, nested="missing"),)})
    with pytest.raises(ValueError):
        SchemaRegistry({"root": (SchemaRule("a", False, ValueType.STRING), SchemaRule("a", True, ValueType.STRING))})


def test_version_is_exposed():
    assert SchemaRegistry(version="2.0").version == "2.0"
