"""Field descriptor models.

Descriptors are derived once per record type and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from structcopy.core.annotation import AnnotationPolicy


class Visibility(Enum):
    """Whether a field is readable from outside its declaring record."""

    VISIBLE = auto()
    ENCAPSULATED = auto()  # name starts with an underscore

    @classmethod
    def of(cls, name: str) -> Visibility:
        return cls.ENCAPSULATED if name.startswith("_") else cls.VISIBLE


@dataclass(frozen=True, slots=True)
class EmbeddingStep:
    """One embedding field crossed to reach a promoted field."""

    name: str
    visibility: Visibility
    type: Any


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """A field as declared directly on a record type."""

    name: str
    type: Any
    policy: AnnotationPolicy
    visibility: Visibility
    embedded: bool = False


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """A field to copy, after embedded records have been flattened."""

    name: str
    destination_key: str
    required: bool
    ignored: bool
    visibility: Visibility
    nesting_path: tuple[EmbeddingStep, ...]
    type: Any

    @property
    def depth(self) -> int:
        return len(self.nesting_path)

    @property
    def encapsulated(self) -> bool:
        return self.visibility is Visibility.ENCAPSULATED

    def __str__(self) -> str:
        return ".".join([*(step.name for step in self.nesting_path), self.name])


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """Cached field layout of one record type."""

    record_type: type
    declared: tuple[FieldSpec, ...]
    """Fields declared directly on the type, in declaration order."""

    fields: tuple[FieldDescriptor, ...]
    """Flattened, shadow-resolved fields in enumeration order."""

    def copyable_fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(f for f in self.fields if not f.ignored)
