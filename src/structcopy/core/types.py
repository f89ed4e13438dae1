"""Core type definitions and type-hint classification.

Usage:
    @dataclass
    class Node:
        value: np.int8
        next: Ptr[Node] | None = None

    type_info(Ptr[int])        # TypeInfo(kind=Kind.POINTER, args=(int,), ...)
    type_info(np.int8).bits    # 8
"""

from __future__ import annotations

import dataclasses
import types
import typing
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, TypeAliasType

import numpy as np


class Ptr[T]:
    """Reference cell standing in for a pointer.

    A ``Ptr`` always refers to a storage cell; a nil pointer is ``None``.
    Cells compare equal when the values they hold are equal.

    Args:
        value: Value held by the cell.
        type: Static type of the held value. Defaults to ``type(value)``.
    """

    __slots__ = ("value", "_type")

    def __init__(self, value: T | None = None, type: Any = None) -> None:
        self.value = value
        self._type = type

    @classmethod
    def to(cls, tp: Any) -> Ptr[Any]:
        """Create a cell of static type ``tp`` holding ``None``."""
        return cls(None, tp)

    @property
    def type(self) -> Any:
        """Static type of the held value."""
        if self._type is not None:
            return self._type
        return Any if self.value is None else type(self.value)

    def deref(self) -> T | None:
        return self.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ptr):
            return NotImplemented
        return bool(self.value == other.value)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Ptr({self.value!r})"


@dataclass(frozen=True, slots=True)
class Dynamic:
    """A value paired with the concrete runtime type a dynamic holder erased."""

    type: type
    value: Any

    @classmethod
    def of(cls, value: Any) -> Dynamic:
        return cls(type=type(value), value=value)


class Kind(Enum):
    """Classification of a type hint for conversion dispatch."""

    ANY = auto()  # Any, object, or a union of several types
    POINTER = auto()  # Ptr[T]
    OPTIONAL = auto()  # T | None
    BOOL = auto()
    INT = auto()
    FLOAT = auto()
    STR = auto()
    BYTES = auto()
    SEQUENCE = auto()
    MAPPING = auto()
    RECORD = auto()
    OPAQUE = auto()  # any other class, copied only as-is


@dataclass(frozen=True, slots=True)
class TypeInfo:
    """Resolved facts about a type hint.

    Attributes:
        kind: Dispatch classification.
        cls: Concrete runtime class used to build destination values.
        args: Element types (pointee, sequence element, key and value).
        bits: Width of fixed-width numbers, None for unbounded ``int``.
        signed: Signedness of integer types.
    """

    kind: Kind
    cls: Any = None
    args: tuple[Any, ...] = ()
    bits: int | None = None
    signed: bool = True

    @property
    def elem(self) -> Any:
        return self.args[0] if self.args else Any


def is_pydantic(cls: Any) -> bool:
    """Check if class is a Pydantic model without importing pydantic."""
    if not isinstance(cls, type):
        return False
    for base in cls.__mro__:
        if base.__module__.startswith("pydantic") and base.__name__ == "BaseModel":
            return True
    return False


def is_record(cls: Any) -> bool:
    return isinstance(cls, type) and (dataclasses.is_dataclass(cls) or is_pydantic(cls))


def underlying(tp: Any) -> Any:
    """Strip NewType, ``type`` aliases and Annotated wrappers from a hint."""
    while True:
        if isinstance(tp, typing.NewType):
            tp = tp.__supertype__
        elif isinstance(tp, TypeAliasType):
            tp = tp.__value__
        elif typing.get_origin(tp) is typing.Annotated:
            tp = typing.get_args(tp)[0]
        else:
            return tp


def type_info(tp: Any) -> TypeInfo:
    """Classify a type hint.

    Args:
        tp: Any type hint: a class, a generic alias, a union, NewType, ...

    Returns:
        TypeInfo describing how values of this type are converted.
    """
    tp = underlying(tp)
    if tp is Any or tp is object or tp is None:
        return TypeInfo(Kind.ANY)

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin is typing.Union or origin is types.UnionType:
        members = tuple(a for a in args if a is not type(None))
        if len(members) == 1 and len(members) != len(args):
            return TypeInfo(Kind.OPTIONAL, args=members)
        return TypeInfo(Kind.ANY, args=members)

    if origin is Ptr or tp is Ptr:
        return TypeInfo(Kind.POINTER, cls=Ptr, args=args or (Any,))

    cls = origin if origin is not None else tp
    if not isinstance(cls, type):
        return TypeInfo(Kind.OPAQUE, cls=cls)

    if issubclass(cls, (bool, np.bool_)):
        return TypeInfo(Kind.BOOL, cls=cls)
    if issubclass(cls, Enum):
        return TypeInfo(Kind.OPAQUE, cls=cls)
    if issubclass(cls, np.integer):
        return TypeInfo(
            Kind.INT,
            cls=cls,
            bits=np.iinfo(cls).bits,
            signed=issubclass(cls, np.signedinteger),
        )
    if issubclass(cls, int):
        return TypeInfo(Kind.INT, cls=cls)
    if issubclass(cls, np.floating):
        return TypeInfo(Kind.FLOAT, cls=cls, bits=np.finfo(cls).bits)
    if issubclass(cls, float):
        return TypeInfo(Kind.FLOAT, cls=cls, bits=64)
    if issubclass(cls, str):
        return TypeInfo(Kind.STR, cls=cls)
    if issubclass(cls, (bytes, bytearray)):
        return TypeInfo(Kind.BYTES, cls=cls)
    if is_record(cls):
        return TypeInfo(Kind.RECORD, cls=cls)
    if issubclass(cls, Mapping):
        key, value = args if len(args) == 2 else (Any, Any)
        return TypeInfo(Kind.MAPPING, cls=cls, args=(key, value))
    if issubclass(cls, tuple):
        # tuple[T, ...] is homogeneous; fixed-shape tuples fall back to Any elements
        elem = args[0] if len(args) == 2 and args[1] is Ellipsis else Any
        return TypeInfo(Kind.SEQUENCE, cls=tuple, args=(elem,))
    if issubclass(cls, Sequence):
        return TypeInfo(Kind.SEQUENCE, cls=cls, args=args[:1] or (Any,))
    return TypeInfo(Kind.OPAQUE, cls=cls)


def is_string_like(tp: Any) -> bool:
    """Check if a hint is ``str`` or has ``str`` as its underlying representation."""
    return type_info(tp).kind is Kind.STR
