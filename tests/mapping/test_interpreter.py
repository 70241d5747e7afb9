import pytest

from maptools.mapping.engine import DataTransformer
from maptools.mapping.interpreter import ABSENT, EvaluationContext, extract, get_item


def _engine():
    return DataTransformer({"upper": lambda s: s.upper(), "any": lambda v: v, "int": int})


# ==========================================================
# PATH EXTRACTION
# ==========================================================


@pytest.mark.parametrize(
    "scope, segment, expected",
    [
        ({"a": 1}, "a", 1),
        ({"a": None}, "a", None),
        ({"a": 1}, "b", ABSENT),
        (["x", "y"], "1", "y"),
        (["x", "y"], "2", ABSENT),
        (["x", "y"], "-1", ABSENT),
        ("abc", "0", ABSENT),
        (42, "a", ABSENT),
        (None, "a", ABSENT),
    ],
)
def test_get_item(scope, segment, expected):
    result = get_item(scope, segment)
    if expected is ABSENT:
        assert result is ABSENT
    else:
        assert result == expected


def test_extract_is_total():
    ctx = EvaluationContext.top({"a": {"b": 5}})
    assert extract(ctx, ("a", "b")) == 5
    assert extract(ctx, ("a", "b", "c")) is ABSENT
    assert extract(ctx, ("x", "y")) is ABSENT


def test_extract_virtual_segments():
    root = {"name": "root", "$root": "shadow", "$parent": "shadow"}
    top = EvaluationContext.top(root)
    child = top.enter({"name": "child"})
    grandchild = child.enter({"name": "grandchild"})

    assert extract(grandchild, ("$root", "name")) == "root"
    assert extract(grandchild, ("$parent", "name")) == "child"
    assert extract(grandchild, ("$parent", "$parent", "name")) == "root"
    assert extract(grandchild, ("$parent", "$parent", "$parent")) is ABSENT
    assert extract(top, ("$parent",)) is ABSENT
    # real data keys with reserved names are never read
    assert extract(top, ("$root",)) is root
    assert extract(child, ("name", "$parent")) is ABSENT


# ==========================================================
# EVALUATION
# ==========================================================


def test_shape_mirrors_mapping():
    t = _engine().create_transformation(
        {"properties": {"a": ["x:upper", "y:upper", {"z": "nope.nope:upper[]"}], "b": {}}}
    )
    out = t.transform({"x": "p"})
    assert out == {"a": ["P", None, {"z": []}], "b": {}}


def test_missing_and_null_values():
    t = _engine().create_transformation(
        {"properties": {"s": "v:upper", "arr": "v:upper[]"}}
    )
    assert t.transform({}) == {"s": None, "arr": []}
    assert t.transform({"v": None}) == {"s": None, "arr": []}
    assert t.transform(None) == {"s": None, "arr": []}


def test_array_mismatch_gives_empty_list():
    t = _engine().create_transformation({"properties": {"tags": "tags:upper[]"}})
    assert t.transform({"tags": "abc"}) == {"tags": []}
    assert t.transform({"tags": {"a": "b"}}) == {"tags": []}
    assert t.transform({"tags": ("a", "b")}) == {"tags": ["A", "B"]}


def test_list_index_segment():
    t = _engine().create_transformation({"properties": {"first": "items.0.name:upper"}})
    assert t.transform({"items": [{"name": "a"}, {"name": "b"}]}) == {"first": "A"}


def test_nested_array_of_records():
    t = _engine().create_transformation(
        {
            "properties": {"lines": "order.lines:$line[]"},
            "nested": {
                "$line": {
                    "sku": "sku:upper",
                    "qty": "qty:int",
                    "order_id": "$parent.order.id:any",
                    "customer": "$root.customer:upper",
                }
            },
        }
    )
    data = {
        "customer": "ann",
        "order": {"id": 7, "lines": [{"sku": "ab", "qty": "2"}, {"sku": "cd", "qty": "3"}]},
    }
    assert t.transform(data) == {
        "lines": [
            {"sku": "AB", "qty": 2, "order_id": 7, "customer": "ANN"},
            {"sku": "CD", "qty": 3, "order_id": 7, "customer": "ANN"},
        ]
    }


def test_parent_is_enclosing_scope_not_the_value():
    t = _engine().create_transformation(
        {
            "properties": {"outer": "a:$outer"},
            "nested": {
                "$outer": {"inner": "b:$inner", "tag": "tag:any"},
                "$inner": {"parent_tag": "$parent.tag:any", "root_tag": "$root.tag:any"},
            },
        }
    )
    data = {"tag": "top", "a": {"tag": "a-level", "b": {"tag": "b-level"}}}
    assert t.transform(data) == {
        "outer": {"inner": {"parent_tag": "a-level", "root_tag": "top"}, "tag": "a-level"}
    }


def test_recursive_nested_mapping_bounded_by_data():
    t = _engine().create_transformation(
        {
            "properties": "tree:$node",
            "nested": {"$node": {"name": "name:upper", "children": "children:$node[]"}},
        }
    )
    data = {"tree": {"name": "a", "children": [{"name": "b"}, {"name": "c", "children": []}]}}
    assert t.transform(data) == {
        "name": "A",
        "children": [{"name": "B", "children": []}, {"name": "C", "children": []}],
    }


def test_converter_errors_propagate():
    t = _engine().create_transformation({"properties": {"n": "n:int"}})
    with pytest.raises(ValueError):
        t.transform({"n": "not-a-number"})


def test_converter_removed_after_compile_yields_none():
    engine = _engine()
    t = engine.create_transformation({"properties": {"n": "n:int"}})
    engine.registry._converters.pop("int")
    assert t.transform({"n": "1"}) == {"n": None}


def test_converter_replaced_after_compile_is_used():
    engine = _engine()
    t = engine.create_transformation({"properties": {"n": "n:upper"}})
    engine.register_converter("upper", lambda s: s + "!")
    assert t.transform({"n": "x"}) == {"n": "x!"}
