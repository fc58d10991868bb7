"""dynstruct — typed field access over structs and runtime-built struct types."""

from .builder import DynamicStruct, DynamicStructBuilder
from .decoder import DecodeResult, Decoder, JSONDecoder, decode_json, json_to_getter
from .errors import (
    DuplicateField,
    DynStructError,
    FieldNotFound,
    InvalidFieldName,
    InvalidTarget,
    MalformedInput,
    NotASequenceOfStructs,
    TypeMismatch,
    UnsupportedKind,
    UnsupportedShape,
)
from .getter import Getter
from .kinds import Kind, TypeDescriptor, describe, infer
from .naming import to_exported_name
from .typedef import FieldSpec

__all__ = [
    "Getter",
    "DynamicStruct",
    "DynamicStructBuilder",
    "Decoder",
    "JSONDecoder",
    "DecodeResult",
    "decode_json",
    "json_to_getter",
    "FieldSpec",
    "Kind",
    "TypeDescriptor",
    "describe",
    "infer",
    "to_exported_name",
    "DynStructError",
    "InvalidTarget",
    "FieldNotFound",
    "TypeMismatch",
    "NotASequenceOfStructs",
    "DuplicateField",
    "UnsupportedKind",
    "InvalidFieldName",
    "MalformedInput",
    "UnsupportedShape",
]
