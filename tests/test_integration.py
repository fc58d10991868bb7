"""End-to-end: decode → build → access."""

from dataclasses import dataclass
from typing import Optional

import msgspec
import pytest

from dynstruct import (
    DynamicStructBuilder,
    FieldNotFound,
    Getter,
    InvalidTarget,
    decode_json,
    json_to_getter,
)


@dataclass
class Item:
    K: str


@dataclass
class Holder:
    items: list[Item]
    item_ptrs: list[Optional[Item]]
    _s: str = "z"


def test_decode_then_access():
    """{"a_b":"x","n":5} → AB string / N float64, readable through a Getter."""
    dr = decode_json(b'{"a_b":"x","n":5}')
    g = Getter(dr.decoded_instance)
    assert g.as_string("AB") == "x"
    assert g.as_float64("N") == 5.0


def test_map_over_in_order():
    """map_over with (i, g) => g.as_string("K") over [{K:"a"},{K:"b"}] → ["a", "b"]."""
    holder = Holder(items=[Item("a"), Item("b")], item_ptrs=[Item("c")])
    g = Getter(holder)
    assert g.map_over("items", lambda i, e: e.as_string("K")) == ["a", "b"]
    assert g.map_over("item_ptrs", lambda i, e: e.as_string("K")) == ["c"]


def test_unexported_field_and_nil_target():
    g = Getter(Holder(items=[], item_ptrs=[]))
    assert g.as_string("_s") == "z"
    assert g.is_string("_s")
    with pytest.raises(InvalidTarget):
        Getter(None)


@pytest.mark.parametrize(
    "name, expected",
    [("items", "list[Item]"), ("item_ptrs", "list[optional[Item]]"), ("_s", "string")],
)
def test_present_fields_match_declared_kind(name, expected):
    g = Getter(Holder(items=[Item("a")], item_ptrs=[None]))
    assert g.has(name)
    assert str(g.type_of(name)) == expected


def test_absent_field_everywhere():
    g = json_to_getter(b'{"present": 1}')
    assert not g.has("Absent")
    predicates = [m for m in dir(g) if m.startswith("is_")]
    assert len(predicates) == 11
    assert not any(getattr(g, p)("Absent") for p in predicates)
    with pytest.raises(FieldNotFound):
        g.value_of("Absent")
    with pytest.raises(FieldNotFound):
        g.type_of("Absent")


def test_decoded_array_of_objects_stays_maps():
    """Arrays of objects decode to maps, so map_over does not apply to them."""
    g = json_to_getter(b'{"rows": [{"k": "a"}, {"k": "b"}]}')
    assert g.is_slice("Rows")
    assert [row["k"] for row in g.get("Rows")] == ["a", "b"]


def test_builder_instance_populated_and_wrapped():
    inner = DynamicStructBuilder("Row").add_string("K", tag="k").build()
    ds = (
        DynamicStructBuilder("Table")
        .add_string("Title", tag="title")
        .add_slice("Rows", inner, tag="rows")
        .build()
    )
    table = msgspec.json.decode(b'{"title": "t", "rows": [{"k": "a"}, {"k": "b"}]}', type=ds.type)
    g = Getter(table)
    assert g.as_string("Title") == "t"
    assert g.map_over("Rows", lambda i, row: f"{i}:{row.as_string('K')}") == ["0:a", "1:b"]
    assert msgspec.json.decode(msgspec.json.encode(table)) == {
        "rows": [{"k": "a"}, {"k": "b"}],
        "title": "t",
    }
