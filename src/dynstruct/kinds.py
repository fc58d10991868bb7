"""Field kinds and type descriptors for struct introspection."""

from __future__ import annotations

import asyncio
import collections.abc
import dataclasses
import logging
import queue
import types
import typing
from dataclasses import dataclass
from enum import Enum, auto
from typing import Annotated, Any, Optional

import msgspec
from msgspec import structs

from .errors import UnsupportedKind

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Kind
# ---------------------------------------------------------------------------

class Kind(Enum):
    ANY = auto()
    BOOL = auto()
    INT64 = auto()
    UINT64 = auto()
    FLOAT64 = auto()
    STRING = auto()
    BYTES = auto()
    MAP = auto()
    SLICE = auto()
    STRUCT = auto()
    OPTIONAL = auto()
    FUNC = auto()
    CHAN = auto()


_KIND_NAMES = {
    Kind.ANY: "any",
    Kind.BOOL: "bool",
    Kind.INT64: "int64",
    Kind.UINT64: "uint64",
    Kind.FLOAT64: "float64",
    Kind.STRING: "string",
    Kind.BYTES: "bytes",
    Kind.FUNC: "func",
    Kind.CHAN: "chan",
}

_SEQUENCE_ORIGINS = (list, tuple, collections.abc.Sequence, collections.abc.MutableSequence)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)
_CHANNEL_TYPES = (queue.Queue, queue.SimpleQueue, asyncio.Queue)
_BYTES_TYPES = (bytes, bytearray, memoryview)


# ---------------------------------------------------------------------------
# TypeDescriptor
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """Tagged union describing the runtime type of a field.

    ``elem`` is the element of a SLICE, the value of a MAP and the target
    of an OPTIONAL; ``key`` is the key of a MAP; ``struct_type`` is the
    class of a STRUCT.
    """

    kind: Kind
    elem: TypeDescriptor | None = None
    key: TypeDescriptor | None = None
    struct_type: type | None = None

    def __str__(self) -> str:
        if self.kind is Kind.SLICE:
            return f"list[{self.elem}]"
        if self.kind is Kind.MAP:
            return f"map[{self.key}, {self.elem}]"
        if self.kind is Kind.OPTIONAL:
            return f"optional[{self.elem}]"
        if self.kind is Kind.STRUCT:
            return self.struct_type.__name__
        return _KIND_NAMES[self.kind]

    @property
    def target(self) -> TypeDescriptor:
        """The descriptor behind one level of OPTIONAL."""
        if self.kind is Kind.OPTIONAL:
            return self.elem
        return self

    def is_struct_like(self) -> bool:
        return self.target.kind is Kind.STRUCT

    def to_annotation(self) -> Any:
        """Python annotation equivalent to this descriptor."""
        kind = self.kind
        if kind is Kind.SLICE:
            return list[self.elem.to_annotation()]
        if kind is Kind.MAP:
            return dict[self.key.to_annotation(), self.elem.to_annotation()]
        if kind is Kind.OPTIONAL:
            return Optional[self.elem.to_annotation()]
        if kind is Kind.STRUCT:
            return self.struct_type
        return _ANNOTATIONS[kind]

    def zero(self) -> Any:
        """Zero value of this descriptor."""
        kind = self.kind
        if kind is Kind.SLICE:
            return []
        if kind is Kind.MAP:
            return {}
        if kind is Kind.STRUCT:
            return zero_struct(self.struct_type)
        return _ZEROES.get(kind)


ANY = TypeDescriptor(Kind.ANY)
BOOL = TypeDescriptor(Kind.BOOL)
INT64 = TypeDescriptor(Kind.INT64)
UINT64 = TypeDescriptor(Kind.UINT64)
FLOAT64 = TypeDescriptor(Kind.FLOAT64)
STRING = TypeDescriptor(Kind.STRING)
BYTES = TypeDescriptor(Kind.BYTES)
FUNC = TypeDescriptor(Kind.FUNC)
CHAN = TypeDescriptor(Kind.CHAN)


def slice_of(elem: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(Kind.SLICE, elem=elem)


def map_of(key: TypeDescriptor, value: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(Kind.MAP, elem=value, key=key)


def optional_of(target: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(Kind.OPTIONAL, elem=target)


def struct_of(struct_type: type) -> TypeDescriptor:
    return TypeDescriptor(Kind.STRUCT, struct_type=struct_type)


_ANNOTATIONS = {
    Kind.ANY: Any,
    Kind.BOOL: bool,
    Kind.INT64: int,
    Kind.UINT64: Annotated[int, msgspec.Meta(ge=0)],
    Kind.FLOAT64: float,
    Kind.STRING: str,
    Kind.BYTES: bytes,
    Kind.FUNC: collections.abc.Callable,
    Kind.CHAN: queue.Queue,
}

_ZEROES = {
    Kind.BOOL: False,
    Kind.INT64: 0,
    Kind.UINT64: 0,
    Kind.FLOAT64: 0.0,
    Kind.STRING: "",
    Kind.BYTES: b"",
}


# ---------------------------------------------------------------------------
# Struct classes
# ---------------------------------------------------------------------------

def is_struct_type(tp: Any) -> bool:
    """msgspec Structs, dataclasses and NamedTuples count as structs."""
    if not isinstance(tp, type) or isinstance(tp, types.GenericAlias):
        return False
    if issubclass(tp, msgspec.Struct) or dataclasses.is_dataclass(tp):
        return True
    return issubclass(tp, tuple) and hasattr(tp, "_fields")


def is_struct(value: Any) -> bool:
    return not isinstance(value, type) and is_struct_type(type(value))


def struct_schema(cls: type) -> list[tuple[str, Any, bool]]:
    """Return ``(name, annotation, required)`` per declared field of *cls*.

    The annotation is ``None`` when it cannot be resolved.
    """
    if issubclass(cls, msgspec.Struct):
        return [(f.name, f.type, f.required) for f in structs.fields(cls)]

    hints = _type_hints(cls)
    if dataclasses.is_dataclass(cls):
        return [
            (
                f.name,
                hints.get(f.name),
                f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING,
            )
            for f in dataclasses.fields(cls)
        ]
    return [(name, hints.get(name), name not in cls._field_defaults) for name in cls._fields]


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as exc:
        logger.debug("annotations of %s unresolvable (%s); describing by value", cls.__name__, exc)
        return {}


def zero_struct(cls: type) -> Any:
    """Instantiate *cls* with every required field set to its zero value."""
    kwargs = {}
    for name, annotation, required in struct_schema(cls):
        if required:
            kwargs[name] = None if annotation is None else describe(annotation).zero()
    return cls(**kwargs)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def describe(tp: Any) -> TypeDescriptor:
    """Resolve a Python annotation to a TypeDescriptor.

    Raises UnsupportedKind for annotations no field kind can represent.
    """
    if isinstance(tp, TypeDescriptor):
        return tp
    # Built dynamic structs expose their own descriptor.
    descriptor = getattr(tp, "descriptor", None)
    if isinstance(descriptor, TypeDescriptor):
        return descriptor
    if tp is Any or tp is object:
        return ANY

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin is Annotated:
        inner, *meta = args
        if inner is int and any(_is_unsigned(m) for m in meta):
            return UINT64
        return describe(inner)

    if origin is typing.Union or origin is types.UnionType:
        members = [a for a in args if a is not type(None)]
        if len(members) == 1 and len(members) < len(args):
            return optional_of(describe(members[0]))
        raise UnsupportedKind(f"cannot represent union {tp!r} as a field kind")

    if tp is bool:
        return BOOL
    if tp is int:
        return INT64
    if tp is float:
        return FLOAT64
    if tp is str:
        return STRING
    if tp in _BYTES_TYPES:
        return BYTES

    if tp in _SEQUENCE_ORIGINS or origin in _SEQUENCE_ORIGINS:
        if not args:
            return slice_of(ANY)
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            raise UnsupportedKind(f"fixed-length tuple {tp!r} is not a sequence kind")
        return slice_of(describe(args[0]))

    if tp in _MAPPING_ORIGINS or origin in _MAPPING_ORIGINS:
        if not args:
            return map_of(ANY, ANY)
        return map_of(describe(args[0]), describe(args[1]))

    if tp is collections.abc.Callable or origin is collections.abc.Callable:
        return FUNC
    if tp in _CHANNEL_TYPES or origin in _CHANNEL_TYPES:
        return CHAN

    if is_struct_type(tp):
        return struct_of(tp)

    raise UnsupportedKind(f"cannot represent {tp!r} as a field kind")


def _is_unsigned(meta: Any) -> bool:
    return isinstance(meta, msgspec.Meta) and meta.ge is not None and meta.ge >= 0


def infer(value: Any) -> TypeDescriptor:
    """Describe a runtime value whose declared type is unknown."""
    if value is None:
        return ANY
    if isinstance(value, bool):
        return BOOL
    if isinstance(value, int):
        return INT64
    if isinstance(value, float):
        return FLOAT64
    if isinstance(value, str):
        return STRING
    if isinstance(value, _BYTES_TYPES):
        return BYTES
    if is_struct(value):
        return struct_of(type(value))
    if isinstance(value, (list, tuple)):
        return slice_of(ANY)
    if isinstance(value, collections.abc.Mapping):
        return map_of(ANY, ANY)
    if isinstance(value, _CHANNEL_TYPES):
        return CHAN
    if callable(value):
        return FUNC
    return ANY
