"""Tests for dynstruct.kinds."""

import asyncio
import queue
import typing
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Mapping, NamedTuple, Optional, Sequence, TypeVar

import msgspec
import pytest

from dynstruct import Kind, UnsupportedKind, describe, infer
from dynstruct.kinds import (
    ANY,
    FLOAT64,
    INT64,
    STRING,
    UINT64,
    TypeDescriptor,
    is_struct,
    is_struct_type,
    map_of,
    optional_of,
    slice_of,
    struct_of,
    zero_struct,
)

T = TypeVar("T")


@dataclass
class Inner:
    name: str
    size: int = 3


class Coord(NamedTuple):
    lat: float
    lon: float


class Record(msgspec.Struct):
    id: int
    inner: Inner


class TestDescribe:
    @pytest.mark.parametrize(
        "tp, kind",
        [
            (Any, Kind.ANY),
            (object, Kind.ANY),
            (bool, Kind.BOOL),
            (int, Kind.INT64),
            (Annotated[int, msgspec.Meta(ge=0)], Kind.UINT64),
            (Annotated[int, msgspec.Meta(ge=-5)], Kind.INT64),
            (Annotated[str, "doc"], Kind.STRING),
            (float, Kind.FLOAT64),
            (str, Kind.STRING),
            (bytes, Kind.BYTES),
            (bytearray, Kind.BYTES),
            (memoryview, Kind.BYTES),
            (list, Kind.SLICE),
            (list[int], Kind.SLICE),
            (typing.List[str], Kind.SLICE),
            (tuple[int, ...], Kind.SLICE),
            (Sequence[str], Kind.SLICE),
            (dict, Kind.MAP),
            (dict[str, int], Kind.MAP),
            (Mapping[str, Any], Kind.MAP),
            (Optional[int], Kind.OPTIONAL),
            (int | None, Kind.OPTIONAL),
            (Callable, Kind.FUNC),
            (Callable[[int], str], Kind.FUNC),
            (queue.Queue, Kind.CHAN),
            (queue.Queue[int], Kind.CHAN),
            (asyncio.Queue, Kind.CHAN),
            (Inner, Kind.STRUCT),
            (Coord, Kind.STRUCT),
            (Record, Kind.STRUCT),
        ],
    )
    def test_kind(self, tp, kind):
        assert describe(tp).kind is kind

    def test_nested(self):
        descriptor = describe(dict[str, list[Optional[Inner]]])
        assert descriptor == map_of(STRING, slice_of(optional_of(struct_of(Inner))))
        assert str(descriptor) == "map[string, list[optional[Inner]]]"

    def test_bare_containers_hold_any(self):
        assert describe(list) == slice_of(ANY)
        assert describe(dict) == map_of(ANY, ANY)

    def test_descriptor_passes_through(self):
        assert describe(FLOAT64) is FLOAT64

    @pytest.mark.parametrize(
        "tp",
        [T, int | str, Optional[int | str], set[int], tuple[int, str], complex, type(None), 42],
    )
    def test_unsupported(self, tp):
        with pytest.raises(UnsupportedKind):
            describe(tp)


class TestInfer:
    @pytest.mark.parametrize(
        "value, kind",
        [
            (None, Kind.ANY),
            (True, Kind.BOOL),
            (1, Kind.INT64),
            (1.5, Kind.FLOAT64),
            ("s", Kind.STRING),
            (b"b", Kind.BYTES),
            ([1], Kind.SLICE),
            ((1, 2), Kind.SLICE),
            ({"a": 1}, Kind.MAP),
            (queue.Queue(), Kind.CHAN),
            (len, Kind.FUNC),
            (Inner("x"), Kind.STRUCT),
            (Coord(1.0, 2.0), Kind.STRUCT),
            (1j, Kind.ANY),
        ],
    )
    def test_kind(self, value, kind):
        assert infer(value).kind is kind


class TestDescriptor:
    def test_str(self):
        assert str(UINT64) == "uint64"
        assert str(slice_of(map_of(STRING, ANY))) == "list[map[string, any]]"
        assert str(struct_of(Coord)) == "Coord"

    def test_target(self):
        assert optional_of(INT64).target is INT64
        assert INT64.target is INT64

    def test_hashable(self):
        assert len({slice_of(STRING), slice_of(STRING), slice_of(INT64)}) == 2

    def test_zero(self):
        assert STRING.zero() == ""
        assert FLOAT64.zero() == 0.0
        assert optional_of(INT64).zero() is None
        assert slice_of(INT64).zero() == []
        assert map_of(STRING, STRING).zero() == {}
        assert TypeDescriptor(Kind.BYTES).zero() == b""

    def test_zero_lists_are_fresh(self):
        descriptor = slice_of(INT64)
        assert descriptor.zero() is not descriptor.zero()

    def test_to_annotation_round_trips(self):
        for tp in (int, str, float, bool, bytes, list[str], dict[str, float], Optional[Inner]):
            assert describe(describe(tp).to_annotation()) == describe(tp)

    def test_uint_annotation(self):
        assert describe(UINT64.to_annotation()) is UINT64


class TestStructs:
    def test_is_struct_type(self):
        assert is_struct_type(Inner)
        assert is_struct_type(Coord)
        assert is_struct_type(Record)
        assert not is_struct_type(tuple)
        assert not is_struct_type(dict)

    def test_is_struct(self):
        assert is_struct(Inner("x"))
        assert not is_struct(Inner)
        assert not is_struct((1, 2))

    def test_zero_struct(self):
        assert zero_struct(Inner) == Inner(name="", size=3)
        assert zero_struct(Coord) == Coord(0.0, 0.0)
        record = zero_struct(Record)
        assert record.id == 0
        assert record.inner == Inner(name="", size=3)
