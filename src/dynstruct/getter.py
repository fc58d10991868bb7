"""Getter: typed, name-keyed access to the fields of one struct value."""

from __future__ import annotations

import copy
from typing import Any, Callable, TypeVar

from .errors import FieldNotFound, InvalidTarget, NotASequenceOfStructs, TypeMismatch, UnsupportedKind
from .kinds import Kind, TypeDescriptor, describe, infer, is_struct, struct_schema

R = TypeVar("R")


class Getter:
    """Read-only accessor over a single struct value.

    Strict accessors (``type_of``, ``value_of``, ``as_*``) raise on a missing
    field or an incompatible kind. ``has``, ``get`` and the ``is_*``
    predicates never raise.

    Fields whose name starts with an underscore are indexed like any other.
    A field declared ``X | None`` is read through: predicates and extractors
    look at ``X``.
    """

    __slots__ = ("_struct", "_index")

    def __init__(self, obj: Any) -> None:
        if obj is None:
            raise InvalidTarget("cannot wrap None")
        if not is_struct(obj):
            raise InvalidTarget(f"{type(obj).__name__} is not a struct")

        self._struct = obj
        self._index: dict[str, TypeDescriptor] = {
            name: _descriptor(obj, name, annotation)
            for name, annotation, _ in struct_schema(type(obj))
        }

    def __repr__(self) -> str:
        return f"Getter({self._struct!r})"

    # -- Index -----------------------------------------------------------

    def has(self, name: str) -> bool:
        return name in self._index

    def names(self) -> list[str]:
        """Field names in declaration order."""
        return list(self._index)

    def num_fields(self) -> int:
        return len(self._index)

    def type_of(self, name: str) -> TypeDescriptor:
        try:
            return self._index[name]
        except KeyError:
            raise FieldNotFound(name) from None

    # -- Raw values ------------------------------------------------------

    def value_of(self, name: str) -> Any:
        """Field value. Struct values are returned as shallow copies."""
        self.type_of(name)
        return self._present(name)

    def get(self, name: str, default: Any = None) -> Any:
        """Field value, or *default* when the field does not exist."""
        if name not in self._index:
            return default
        return self._present(name)

    def _present(self, name: str) -> Any:
        value = self._read(name)
        if is_struct(value):
            return copy.copy(value)
        return value

    def _read(self, name: str) -> Any:
        # dataclass fields declared init=False may never have been assigned
        return getattr(self._struct, name, None)

    # -- Typed extraction -----------------------------------------------

    def as_string(self, name: str) -> str:
        """Field value as text; non-string values are rendered with str()."""
        value = self.value_of(name)
        if isinstance(value, str):
            return value
        return str(value)

    def as_int64(self, name: str) -> int:
        value = self._expect(name, Kind.INT64)
        if isinstance(value, bool):
            raise TypeMismatch(f"field {name!r} holds a bool, not an int64")
        return int(value)

    def as_uint64(self, name: str) -> int:
        value = self._expect(name, Kind.UINT64)
        if isinstance(value, bool) or value < 0:
            raise TypeMismatch(f"field {name!r} holds {value!r}, not a uint64")
        return int(value)

    def as_float64(self, name: str) -> float:
        return float(self._expect(name, Kind.FLOAT64))

    def as_bool(self, name: str) -> bool:
        return bool(self._expect(name, Kind.BOOL))

    def as_bytes(self, name: str) -> bytes:
        return bytes(self._expect(name, Kind.BYTES))

    def _expect(self, name: str, kind: Kind) -> Any:
        descriptor = self.type_of(name).target
        if descriptor.kind is not kind:
            raise TypeMismatch(f"field {name!r} is {descriptor}, not {kind.name.lower()}")
        value = self._read(name)
        if value is None:
            raise TypeMismatch(f"field {name!r} is None")
        return value

    # -- Predicates ------------------------------------------------------

    def is_bytes(self, name: str) -> bool:
        return self._is(name, Kind.BYTES)

    def is_string(self, name: str) -> bool:
        return self._is(name, Kind.STRING)

    def is_int64(self, name: str) -> bool:
        return self._is(name, Kind.INT64)

    def is_uint64(self, name: str) -> bool:
        return self._is(name, Kind.UINT64)

    def is_float64(self, name: str) -> bool:
        return self._is(name, Kind.FLOAT64)

    def is_bool(self, name: str) -> bool:
        return self._is(name, Kind.BOOL)

    def is_map(self, name: str) -> bool:
        return self._is(name, Kind.MAP)

    def is_func(self, name: str) -> bool:
        return self._is(name, Kind.FUNC)

    def is_chan(self, name: str) -> bool:
        return self._is(name, Kind.CHAN)

    def is_struct(self, name: str) -> bool:
        return self._is(name, Kind.STRUCT)

    def is_slice(self, name: str) -> bool:
        return self._is(name, Kind.SLICE)

    def _is(self, name: str, kind: Kind) -> bool:
        descriptor = self._index.get(name)
        return descriptor is not None and descriptor.target.kind is kind

    # -- Traversal -------------------------------------------------------

    def map_over(self, name: str, fn: Callable[[int, Getter], R]) -> list[R]:
        """Apply ``fn(index, getter)`` to each struct in a slice field.

        Raises NotASequenceOfStructs unless the field is a slice whose
        elements are structs.
        """
        descriptor = self.type_of(name).target
        items = self._read(name)
        if descriptor.kind is not Kind.SLICE:
            raise NotASequenceOfStructs(f"field {name!r} is {descriptor}, not a slice")
        if items is None:
            return []
        if not _holds_structs(descriptor.elem, items):
            raise NotASequenceOfStructs(f"field {name!r} is {descriptor}, not a slice of structs")
        return [fn(i, Getter(item)) for i, item in enumerate(items)]


def _descriptor(obj: Any, name: str, annotation: Any) -> TypeDescriptor:
    if annotation is not None:
        try:
            return describe(annotation)
        except UnsupportedKind:
            pass
    return infer(getattr(obj, name, None))


def _holds_structs(elem: TypeDescriptor, items: Any) -> bool:
    if elem.is_struct_like():
        return True
    return elem.kind is Kind.ANY and all(is_struct(item) for item in items)
