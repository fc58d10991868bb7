"""Error taxonomy for dynstruct."""

from __future__ import annotations


class DynStructError(Exception):
    """Base class for every error raised by dynstruct."""


# ---------------------------------------------------------------------------
# Getter
# ---------------------------------------------------------------------------

class InvalidTarget(DynStructError, TypeError):
    """The value handed to a Getter is None or not a struct."""


class FieldNotFound(DynStructError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"field {name!r} does not exist")
        self.name = name


class TypeMismatch(DynStructError, TypeError):
    """A strict accessor was used on a field of an incompatible kind."""


class NotASequenceOfStructs(TypeMismatch):
    """map_over() was called on a field that is not a slice of structs."""


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class DuplicateField(DynStructError, ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(f"field {name!r} is defined more than once")
        self.name = name


class UnsupportedKind(DynStructError, TypeError):
    """A requested field type cannot be represented."""


class InvalidFieldName(DynStructError, ValueError):
    """A field name is not a legal exported identifier."""


# ---------------------------------------------------------------------------
# Decoder
# ---------------------------------------------------------------------------

class MalformedInput(DynStructError, ValueError):
    """The raw input could not be parsed."""


class UnsupportedShape(DynStructError, ValueError):
    """A decoded value has a shape no field kind can hold."""
