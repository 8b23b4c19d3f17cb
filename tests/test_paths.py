from __future__ import annotations

from copy import deepcopy

import pytest

from caseflow.paths import (
    apply_updates,
    get_nested_value,
    has_nested_path,
    is_safe_path,
    list_paths,
    parse_path,
    set_nested_value,
)


TREE = {
    "assumptions": {
        "customers": {"segments": [{"id": "a", "volume": {"base_value": 50}}, {"id": "b"}]},
        "pricing": {"avg_unit_price": {"value": 10.0}},
    },
    "meta": {"title": "x"},
}


def test_get_reads_keys_and_indices():
    assert get_nested_value(TREE, "assumptions.customers.segments[0].volume.base_value") == 50
    assert get_nested_value(TREE, "assumptions.customers.segments.1.id") == "b"
    assert get_nested_value(TREE, "assumptions.pricing.avg_unit_price.value") == 10.0


def test_get_returns_none_for_missing_nodes():
    assert get_nested_value(TREE, "assumptions.customers.segments[5].id") is None
    assert get_nested_value(TREE, "assumptions.missing.value") is None
    assert get_nested_value(TREE, "meta.title.value") is None
    assert not has_nested_path(TREE, "assumptions.opex[0]")
    assert has_nested_path(TREE, "meta.title")


def test_set_copies_the_path_and_shares_siblings():
    original = deepcopy(TREE)
    updated = set_nested_value(TREE, "assumptions.customers.segments[0].volume.base_value", 75)

    assert TREE == original
    assert updated["assumptions"]["customers"]["segments"][0]["volume"]["base_value"] == 75
    assert updated is not TREE
    assert updated["assumptions"] is not TREE["assumptions"]
    assert updated["assumptions"]["customers"]["segments"] is not TREE["assumptions"]["customers"]["segments"]
    assert updated["meta"] is TREE["meta"]
    assert updated["assumptions"]["pricing"] is TREE["assumptions"]["pricing"]
    assert updated["assumptions"]["customers"]["segments"][1] is TREE["assumptions"]["customers"]["segments"][1]


def test_set_materializes_missing_containers():
    updated = set_nested_value({}, "assumptions.opex[2].value", 5)
    assert updated == {"assumptions": {"opex": [{}, {}, {"value": 5}]}}


def test_set_creates_nested_arrays_for_consecutive_indices():
    updated = set_nested_value({}, "m[0][1]", 5)
    assert updated == {"m": [[{}, 5]]}
    assert get_nested_value(updated, "m[0][1]") == 5
    assert set_nested_value({}, "m[0].1", 5) == updated
    assert set_nested_value({}, "grid[1][0].cell", 3) == {"grid": [{}, [{"cell": 3}]]}


def test_set_then_get_round_trips():
    for path in ["meta.title", "assumptions.customers.segments[1].volume.series[0].value", "drivers[3].range"]:
        assert get_nested_value(set_nested_value(TREE, path, 42), path) == 42


def test_numeric_segment_indexes_lists():
    data = {"baseline_costs": [{"pct": 1}]}
    assert set_nested_value(data, "baseline_costs.0.pct", 2) == {"baseline_costs": [{"pct": 2}]}


@pytest.mark.parametrize(
    "path",
    ["", "a..b", "a.b[10001]", "a.[0]", "a.b[x]"],
)
def test_malformed_paths_raise(path):
    with pytest.raises(ValueError):
        set_nested_value({}, path, 1)


def test_set_rejects_non_mapping_root_and_wrong_container():
    with pytest.raises(ValueError):
        set_nested_value([], "a", 1)
    with pytest.raises(ValueError):
        set_nested_value({"a": {"b": 1}}, "a[0]", 1)
    with pytest.raises(ValueError):
        set_nested_value({"a": [1]}, "a.b", 1)


def test_parse_path_steps():
    assert parse_path("segments[0][2].value") == [
        ("key", "segments"),
        ("index", 0),
        ("index", 2),
        ("key", "value"),
    ]


def test_list_paths_enumerates_tree():
    assert list_paths({"a": {"b": [1, {"c": 2}]}}) == ["a", "a.b", "a.b[0]", "a.b[1]", "a.b[1].c"]
    assert list_paths({"a": {"b": {"c": 1}}}, max_depth=2) == ["a", "a.b"]


def test_unsafe_paths_are_rejected():
    assert is_safe_path("assumptions.opex[0].value")
    for path in ["__proto__.x", "a.constructor", "a.prototype.b", "a..b", "a.<script>", "a.{b}", ""]:
        assert not is_safe_path(path)
    with pytest.raises(ValueError):
        apply_updates({}, {"__class__.x": 1})


def test_apply_updates_applies_in_order():
    out = apply_updates(TREE, {"meta.title": "y", "meta.periods": 24})
    assert out["meta"] == {"title": "y", "periods": 24}
    assert TREE["meta"] == {"title": "x"}
