"""Normalisation of arbitrary keys into exported field identifiers."""

from __future__ import annotations

import keyword
import re

from .errors import InvalidFieldName

_SEPARATOR_RE = re.compile(r"[_\-.\s]+")


def to_exported_name(key: str) -> str:
    """Camelize *key*: ``string_field`` → ``StringField``, ``user-id`` → ``UserId``.

    Names that collide with a keyword get a trailing underscore
    (``true`` → ``True_``). Raises InvalidFieldName when no legal
    identifier results.
    """
    parts = [p for p in _SEPARATOR_RE.split(key) if p]
    name = "".join(p[0].upper() + p[1:] for p in parts)
    if keyword.iskeyword(name):
        name += "_"
    check_exported_name(name, source=key)
    return name


def check_exported_name(name: str, source: str | None = None) -> None:
    if not name.isidentifier() or keyword.iskeyword(name) or name.startswith("_"):
        origin = name if source is None else source
        raise InvalidFieldName(f"{origin!r} cannot be used as an exported field name")
