"""Decoders: infer a dynamic struct from raw data and populate it."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import msgspec

from .builder import DEFAULT_STRUCT_NAME, DynamicStruct, DynamicStructBuilder
from .errors import InvalidFieldName, MalformedInput, UnsupportedShape
from .getter import Getter
from .kinds import ANY, BOOL, FLOAT64, STRING, TypeDescriptor, map_of, optional_of, slice_of
from .naming import to_exported_name

logger = logging.getLogger(__name__)

_STRING_MAP = map_of(STRING, STRING)
_ANY_MAP = map_of(STRING, ANY)


@dataclass(frozen=True)
class DecodeResult:
    dynamic_struct: DynamicStruct
    decoded_instance: msgspec.Struct


class Decoder(ABC):
    """Infer field specs from parsed data, build the type, unmarshal into it.

    Subclasses supply ``parse`` and ``unmarshal`` for their wire format.

    Numbers always become float64 fields. Nested objects become string
    maps (``map[string, any]`` when their values are not all strings)
    unless ``nested_structs`` is set, in which case they are inferred
    recursively as nested dynamic structs.
    """

    def __init__(self, struct_name: str = DEFAULT_STRUCT_NAME, nested_structs: bool = False) -> None:
        self.struct_name = struct_name
        self.nested_structs = nested_structs

    @abstractmethod
    def parse(self, raw: bytes | str) -> Any:
        """Parse *raw* into plain builtins (dict, list, scalars)."""
        ...

    @abstractmethod
    def unmarshal(self, raw: bytes | str, target: type) -> Any:
        """Decode *raw* into an instance of *target*."""
        ...

    def decode(self, raw: bytes | str) -> DecodeResult:
        tree = self.parse(raw)
        if not isinstance(tree, dict):
            raise UnsupportedShape(f"top level must be an object, not {_shape_name(tree)}")

        ds = self._build(self.struct_name, tree)
        instance = self.unmarshal(raw, ds.type)
        logger.debug("decoded %d top-level keys into %s", len(tree), ds.name)
        return DecodeResult(dynamic_struct=ds, decoded_instance=instance)

    # -- Inference -------------------------------------------------------

    def _build(self, name: str, obj: dict[str, Any]) -> DynamicStruct:
        builder = DynamicStructBuilder(name)
        for key, value in obj.items():
            try:
                field_name = to_exported_name(key)
            except InvalidFieldName as exc:
                raise UnsupportedShape(str(exc)) from exc
            builder.add_field(field_name, self._infer(field_name, value), tag=key)
        return builder.build()

    def _infer(self, name: str, value: Any) -> TypeDescriptor | DynamicStruct:
        if isinstance(value, dict):
            if self.nested_structs:
                return self._build(name, value)
            if all(isinstance(v, str) for v in value.values()):
                return _STRING_MAP
            return _ANY_MAP
        if isinstance(value, list):
            return slice_of(_infer_element(value))
        return _infer_scalar(value)


def _infer_scalar(value: Any) -> TypeDescriptor:
    if value is None:
        return ANY
    if isinstance(value, bool):
        return BOOL
    if isinstance(value, (int, float)):
        return FLOAT64
    if isinstance(value, str):
        return STRING
    raise UnsupportedShape(f"unsupported value {value!r}")


def _infer_element(items: list[Any]) -> TypeDescriptor:
    """Element descriptor shared by every item of an array."""
    present = [item for item in items if item is not None]
    if not present:
        return ANY
    has_nulls = len(present) < len(items)

    if all(isinstance(item, dict) for item in present):
        return _nullable(_ANY_MAP, has_nulls)
    if all(isinstance(item, list) for item in present):
        elems = {_infer_element(item) for item in present}
        elem = elems.pop() if len(elems) == 1 else ANY
        return _nullable(slice_of(elem), has_nulls)
    if any(isinstance(item, (dict, list)) for item in present):
        raise UnsupportedShape("array mixes scalars with objects or arrays")

    kinds = {_infer_scalar(item) for item in present}
    if len(kinds) > 1:
        return ANY
    return _nullable(kinds.pop(), has_nulls)


def _nullable(descriptor: TypeDescriptor, has_nulls: bool) -> TypeDescriptor:
    return optional_of(descriptor) if has_nulls else descriptor


def _shape_name(value: Any) -> str:
    if isinstance(value, list):
        return "an array"
    if value is None:
        return "null"
    return type(value).__name__


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

class JSONDecoder(Decoder):
    def parse(self, raw: bytes | str) -> Any:
        try:
            return msgspec.json.decode(raw)
        except msgspec.DecodeError as exc:
            raise MalformedInput(f"invalid JSON: {exc}") from exc

    def unmarshal(self, raw: bytes | str, target: type) -> Any:
        try:
            return msgspec.json.decode(raw, type=target)
        except msgspec.ValidationError as exc:
            raise UnsupportedShape(f"cannot decode into {target.__name__}: {exc}") from exc
        except msgspec.DecodeError as exc:
            raise MalformedInput(f"invalid JSON: {exc}") from exc


def decode_json(raw: bytes | str, **options: Any) -> DecodeResult:
    return JSONDecoder(**options).decode(raw)


def json_to_getter(raw: bytes | str, **options: Any) -> Getter:
    """Decode *raw* and wrap the populated instance in a Getter."""
    return Getter(decode_json(raw, **options).decoded_instance)
