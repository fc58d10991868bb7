"""Dynamic struct builder: synthesize struct types from FieldSpecs at runtime."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Mapping, Optional

import msgspec

from .errors import DuplicateField, UnsupportedKind, UnsupportedShape
from .kinds import (
    ANY,
    BOOL,
    BYTES,
    CHAN,
    FLOAT64,
    FUNC,
    INT64,
    STRING,
    UINT64,
    Kind,
    TypeDescriptor,
    describe,
    struct_of,
)
from .naming import check_exported_name
from .typedef import FieldSpec

logger = logging.getLogger(__name__)

DEFAULT_STRUCT_NAME = "DynamicStruct"

_FACTORY_KINDS = (Kind.SLICE, Kind.MAP, Kind.STRUCT)


# ---------------------------------------------------------------------------
# DynamicStruct
# ---------------------------------------------------------------------------

class DynamicStruct:
    """A struct type synthesized by DynamicStructBuilder.build().

    ``type`` is a ``msgspec.Struct`` subclass whose fields are sorted by
    name, default to their zero value and encode under their tag.
    """

    __slots__ = ("_name", "_fields", "_type")

    def __init__(self, name: str, fields: tuple[tuple[FieldSpec, TypeDescriptor], ...]) -> None:
        self._name = name
        self._fields = fields
        self._type = msgspec.defstruct(
            name,
            [
                (spec.name, descriptor.to_annotation(), _field_default(spec, descriptor))
                for spec, descriptor in fields
            ],
            module=__name__,
        )

    def __repr__(self) -> str:
        return f"DynamicStruct({self._name!r}, fields={self.num_field()})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> type[msgspec.Struct]:
        return self._type

    @property
    def descriptor(self) -> TypeDescriptor:
        return struct_of(self._type)

    @property
    def fields(self) -> tuple[tuple[FieldSpec, TypeDescriptor], ...]:
        return self._fields

    def num_field(self) -> int:
        return len(self._fields)

    def field_by_name(self, name: str) -> FieldSpec | None:
        for spec, _ in self._fields:
            if spec.name == name:
                return spec
        return None

    def new_instance(self) -> msgspec.Struct:
        """A zero-valued instance of the built type."""
        return self._type()

    def definition(self) -> str:
        lines = [f"{self._name} {{"]
        lines.extend(f"\t{spec.render(descriptor)}" for spec, descriptor in self._fields)
        lines.append("}")
        return "\n".join(lines)

    def decode_map(self, mapping: Mapping[str, Any]) -> msgspec.Struct:
        """Populate an instance from a mapping keyed by field tags."""
        try:
            return msgspec.convert(mapping, self._type)
        except msgspec.ValidationError as exc:
            raise UnsupportedShape(f"cannot convert into {self._name}: {exc}") from exc


def _field_default(spec: FieldSpec, descriptor: TypeDescriptor) -> Any:
    if descriptor.kind in _FACTORY_KINDS:
        return msgspec.field(default_factory=descriptor.zero, name=spec.tag)
    return msgspec.field(default=descriptor.zero(), name=spec.tag)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class DynamicStructBuilder:
    """Accumulates FieldSpecs; build() turns them into a DynamicStruct.

    Field types may be Python annotations, TypeDescriptors or other
    DynamicStructs. They are resolved when build() runs, so an
    unsupported type surfaces there as UnsupportedKind.
    """

    def __init__(self, name: str = DEFAULT_STRUCT_NAME) -> None:
        self._name = name
        self._specs: list[FieldSpec] = []

    def set_struct_name(self, name: str) -> DynamicStructBuilder:
        self._name = name
        return self

    def add_field(self, name: str, type: Any, tag: str | None = None) -> DynamicStructBuilder:
        self._specs.append(FieldSpec(name, type, tag))
        return self

    def add_anonymous_field(self, name: str, type: Any, tag: str | None = None) -> DynamicStructBuilder:
        self._specs.append(FieldSpec(name, type, tag, anonymous=True))
        return self

    def remove_field(self, name: str) -> DynamicStructBuilder:
        self._specs = [spec for spec in self._specs if spec.name != name]
        return self

    def exists(self, name: str) -> bool:
        return any(spec.name == name for spec in self._specs)

    def num_field(self) -> int:
        return len(self._specs)

    # -- Typed shortcuts -------------------------------------------------

    def add_string(self, name: str, tag: str | None = None) -> DynamicStructBuilder:
        return self.add_field(name, STRING, tag)

    def add_int64(self, name: str, tag: str | None = None) -> DynamicStructBuilder:
        return self.add_field(name, INT64, tag)

    def add_uint64(self, name: str, tag: str | None = None) -> DynamicStructBuilder:
        return self.add_field(name, UINT64, tag)

    def add_float64(self, name: str, tag: str | None = None) -> DynamicStructBuilder:
        return self.add_field(name, FLOAT64, tag)

    def add_bool(self, name: str, tag: str | None = None) -> DynamicStructBuilder:
        return self.add_field(name, BOOL, tag)

    def add_bytes(self, name: str, tag: str | None = None) -> DynamicStructBuilder:
        return self.add_field(name, BYTES, tag)

    def add_any(self, name: str, tag: str | None = None) -> DynamicStructBuilder:
        return self.add_field(name, ANY, tag)

    def add_func(self, name: str, tag: str | None = None) -> DynamicStructBuilder:
        return self.add_field(name, FUNC, tag)

    def add_chan(self, name: str, tag: str | None = None) -> DynamicStructBuilder:
        return self.add_field(name, CHAN, tag)

    def add_map(self, name: str, key: Any, value: Any, tag: str | None = None) -> DynamicStructBuilder:
        return self.add_field(name, dict[key, value], tag)

    def add_slice(self, name: str, elem: Any, tag: str | None = None) -> DynamicStructBuilder:
        return self.add_field(name, list[elem], tag)

    def add_struct(self, name: str, struct: Any, tag: str | None = None) -> DynamicStructBuilder:
        return self.add_field(name, struct, tag)

    def add_struct_ptr(self, name: str, struct: Any, tag: str | None = None) -> DynamicStructBuilder:
        if isinstance(struct, DynamicStruct):
            struct = struct.type
        return self.add_field(name, Optional[struct], tag)

    # -- Build -----------------------------------------------------------

    def build(self) -> DynamicStruct:
        """Resolve every spec and synthesize the struct type.

        Fields are ordered by name, so the result does not depend on the
        order in which they were added.
        """
        check_exported_name(self._name)
        _check_unique(spec.name for spec in self._specs)
        _check_unique(spec.encode_name for spec in self._specs)

        fields = []
        for spec in sorted(self._specs, key=lambda s: s.name):
            check_exported_name(spec.name)
            descriptor = describe(spec.type)
            if spec.anonymous and not descriptor.is_struct_like():
                raise UnsupportedKind(f"embedded field {spec.name!r} must be a struct, not {descriptor}")
            fields.append((spec, descriptor))

        ds = DynamicStruct(self._name, tuple(fields))
        logger.debug("built %s with %d fields", self._name, len(fields))
        return ds


def _check_unique(names) -> None:
    for name, count in Counter(names).items():
        if count > 1:
            raise DuplicateField(name)
