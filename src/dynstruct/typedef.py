"""FieldSpec: one field of a dynamically built struct."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .kinds import TypeDescriptor


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type: Any  # annotation, TypeDescriptor or DynamicStruct; resolved at build()
    tag: str | None = None  # encoded key, e.g. the original JSON key
    anonymous: bool = False

    @property
    def encode_name(self) -> str:
        return self.tag if self.tag else self.name

    def render(self, descriptor: TypeDescriptor) -> str:
        """Definition line: ``Name kind `tag:"key"```."""
        line = f"{self.name} {descriptor}"
        if self.tag is not None:
            line += f' `tag:"{self.tag}"`'
        if self.anonymous:
            line += " (embedded)"
        return line
