from ae_registry import (
    ALLOWED_SCRIPTS,
    CATEGORIES,
    ScriptInfo,
    lookup,
    missing_required_params,
    registry_contract,
    scripts_by_category,
)


def test_lookup_known_and_unknown():
    assert lookup("createComposition").required_params == ("name",)
    assert lookup("deleteEverything") is None


def test_missing_params_are_reported_together_in_declared_order():
    info = ScriptInfo(description="x", category="testing", estimated_time="Quick", required_params=("a", "b"))
    assert missing_required_params(info, {}) == ["a", "b"]
    assert missing_required_params(info, {"b": 1}) == ["a"]
    assert missing_required_params(info, {"a": None, "b": 0}) == []


def test_keyframe_operation_requires_full_target():
    info = lookup("setLayerKeyframe")
    assert missing_required_params(info, {"compIndex": 1}) == ["layerIndex", "propertyName", "timeInSeconds", "value"]


def test_every_entry_is_well_formed():
    for name, info in ALLOWED_SCRIPTS.items():
        assert info.description, name
        assert info.estimated_time in ("Quick", "Medium", "Long")
        assert info.category in CATEGORIES


def test_contract_uses_camel_case():
    contract = registry_contract()
    assert contract["batchSetLayerKeyframes"] == {
        "description": "Batch set keyframes (up to 200 keyframes)",
        "category": "batch-animation",
        "requiredParams": ["keyframes"],
        "estimatedTime": "Long",
    }


def test_grouping_covers_every_script():
    grouped = scripts_by_category()
    assert sorted(n for names in grouped.values() for n in names) == sorted(ALLOWED_SCRIPTS)
    assert "createTextLayer" in grouped["creation"]
