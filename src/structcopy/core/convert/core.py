"""Value conversion between static types.

The converter turns a source value of static type ``S`` into a value of
destination type ``D``. Dispatch order:

1. copyability policy on both types
2. dynamic holder sources are unwrapped to their runtime type
3. nullable sources and destinations (``T | None``, ``Ptr[T]``)
4. numeric families
5. identical representations (bool, str, bytes, same class)
6. sequences and mappings, element-wise
7. records, into mappings or into the same record type
"""

from __future__ import annotations

import copy as cp
import inspect
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import numpy as np

from structcopy.core.access import SourceValue
from structcopy.core.convert.numeric import convert_number
from structcopy.core.convert.policy import CopyabilityPolicy
from structcopy.core.descriptor import TypeDescriptorRegistry
from structcopy.core.guard import CycleGuard
from structcopy.core.types import Dynamic, Kind, Ptr, TypeInfo, is_pydantic, type_info
from structcopy.errors import TypeNonCopyableError

_SCALAR_TYPES: dict[Kind, tuple[type, ...]] = {
    Kind.BOOL: (bool, np.bool_),
    Kind.STR: (str,),
    Kind.BYTES: (bytes, bytearray),
}

MappingBuilder = Callable[[SourceValue, Any], dict[Any, Any]]
"""Builds a fresh destination mapping of the given type from a record."""


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


def _concrete(cls: type, fallback: type) -> type:
    return fallback if inspect.isabstract(cls) else cls


def _public(values: dict[str, Any]) -> dict[str, Any]:
    return {name: v for name, v in values.items() if not name.startswith("_")}


def _set_private(model: Any, values: dict[str, Any]) -> Any:
    # pydantic private attributes live outside model fields
    for name, v in values.items():
        if name.startswith("_"):
            setattr(model, name, v)
    return model


class Converter:
    """Recursive value converter for one top-level copy.

    Args:
        policy: Copyability table consulted for every conversion.
        registry: Record descriptor cache.
        guard: Cycle guard owned by the current copy.
        build_mapping: Callback used for record-to-mapping conversions.
    """

    def __init__(
        self,
        policy: CopyabilityPolicy,
        registry: TypeDescriptorRegistry,
        guard: CycleGuard,
        build_mapping: MappingBuilder,
    ):
        """Initialize converter."""
        self.policy = policy
        self.registry = registry
        self.guard = guard
        self._build_mapping = build_mapping

    def convert(self, value: Any, src_type: Any, dst_type: Any, addressable: bool = False) -> Any:
        """Convert ``value`` of static type ``src_type`` into ``dst_type``.

        Args:
            value: Source value.
            src_type: Static type the value was declared with.
            dst_type: Destination type.
            addressable: Whether the value is reached through a reference.

        Returns:
            A destination value. Containers and records are always fresh objects.

        Raises:
            TypeNonCopyableError: If the types are incompatible or opaque.
            ReferenceCycleError: If the value graph refers back to itself.
        """
        self._check_copyable(src_type)
        self._check_copyable(dst_type)
        src = type_info(src_type)
        dst = type_info(dst_type)

        if src.kind is Kind.ANY:
            if value is None:
                return self.zero_value(dst_type)
            match Dynamic.of(value):
                case Dynamic(type=concrete) if type_info(concrete).kind is Kind.ANY:
                    raise TypeNonCopyableError(f"Cannot copy bare {concrete.__name__} instance")
                case Dynamic(type=concrete, value=inner):
                    return self.convert(inner, concrete, dst_type, addressable)

        if src.kind is Kind.OPTIONAL:
            if value is None:
                return self.zero_value(dst_type)
            return self.convert(value, src.elem, dst_type, addressable)

        if dst.kind is Kind.ANY:
            # keep the source's own type, still producing a fresh copy
            return self.convert(value, src_type, src_type, addressable)

        if dst.kind is Kind.OPTIONAL:
            if value is None:
                return None
            return self.convert(value, src_type, dst.elem, addressable)

        if dst.kind is Kind.POINTER:
            if value is None:
                return None
            inner, inner_type, inner_addressable = self._deref(value, src, src_type, addressable)
            return Ptr(self.convert(inner, inner_type, dst.elem, inner_addressable), dst.elem)

        if src.kind is Kind.POINTER:
            if value is None:
                return self.zero_value(dst_type)
            inner, inner_type, inner_addressable = self._deref(value, src, src_type, addressable)
            return self.convert(inner, inner_type, dst_type, inner_addressable)

        if src.kind in (Kind.INT, Kind.FLOAT) and dst.kind in (Kind.INT, Kind.FLOAT):
            return convert_number(value, dst)

        if src.kind is dst.kind and src.kind in (Kind.BOOL, Kind.STR, Kind.BYTES):
            return self._convert_scalar(value, dst)

        if src.kind is Kind.SEQUENCE and dst.kind is Kind.SEQUENCE:
            return self._convert_sequence(value, src, dst, addressable)

        if src.kind is Kind.MAPPING and dst.kind is Kind.MAPPING:
            return self._convert_mapping(value, src, dst, addressable)

        if src.kind is Kind.RECORD and dst.kind is Kind.MAPPING:
            self._expect_record(value, src)
            with self.guard.visit(value):
                return self._build_mapping(SourceValue(value, addressable), dst_type)

        if src.kind is Kind.RECORD and dst.kind is Kind.RECORD and src.cls is dst.cls:
            self._expect_record(value, src)
            with self.guard.visit(value):
                return self.copy_record(value, addressable)

        if src.kind is Kind.OPAQUE and dst.kind is Kind.OPAQUE and isinstance(value, dst.cls):
            return value

        raise TypeNonCopyableError(
            f"Cannot copy {_type_name(src_type)} value into {_type_name(dst_type)}"
        )

    def _check_copyable(self, tp: Any) -> None:
        info = type_info(tp)
        while info.kind in (Kind.POINTER, Kind.OPTIONAL):
            tp = info.elem
            info = type_info(tp)
        if not self.policy.is_copyable(info.cls if info.cls is not None else tp):
            raise TypeNonCopyableError(f"Type {_type_name(tp)} is not copyable")

    @staticmethod
    def _deref(
        value: Any, src: TypeInfo, src_type: Any, addressable: bool
    ) -> tuple[Any, Any, bool]:
        if src.kind is not Kind.POINTER:
            return value, src_type, addressable
        if isinstance(value, Ptr):
            return value.value, src.elem, True
        return value, src.elem, addressable

    @staticmethod
    def _convert_scalar(value: Any, dst: TypeInfo) -> Any:
        if not isinstance(value, _SCALAR_TYPES[dst.kind]):
            raise TypeNonCopyableError(
                f"Cannot copy {type(value).__name__} value into {_type_name(dst.cls)}"
            )
        return value if type(value) is dst.cls else dst.cls(value)

    def _convert_sequence(
        self, value: Any, src: TypeInfo, dst: TypeInfo, addressable: bool
    ) -> Sequence[Any]:
        if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
            raise TypeNonCopyableError(f"Expected a sequence, got {type(value).__name__}")
        with self.guard.visit(value):
            items = [self.convert(item, src.elem, dst.elem, addressable) for item in value]
        return _concrete(dst.cls, list)(items)

    def _convert_mapping(
        self, value: Any, src: TypeInfo, dst: TypeInfo, addressable: bool
    ) -> Mapping[Any, Any]:
        if not isinstance(value, Mapping):
            raise TypeNonCopyableError(f"Expected a mapping, got {type(value).__name__}")
        src_key, src_value = src.args
        dst_key, dst_value = dst.args
        with self.guard.visit(value):
            items = {
                self.convert(k, src_key, dst_key, addressable): self.convert(
                    v, src_value, dst_value, addressable
                )
                for k, v in value.items()
            }
        return _concrete(dst.cls, dict)(items)

    @staticmethod
    def _expect_record(value: Any, src: TypeInfo) -> None:
        if not isinstance(value, src.cls):
            raise TypeNonCopyableError(
                f"Expected {src.cls.__name__} instance, got {type(value).__name__}"
            )

    def copy_record(self, value: Any, addressable: bool = False) -> Any:
        """Copy a record into a fresh instance of the same type, field by field.

        Args:
            value: Dataclass or Pydantic model instance.
            addressable: Whether the record is reached through a reference.

        Returns:
            New record whose fields are converted copies of the source fields.
            Excluded and unset fields keep the source state unread.
        """
        descriptor = self.registry.describe(type(value))
        updates = {
            spec.name: self.convert(getattr(value, spec.name), spec.type, spec.type, addressable)
            for spec in descriptor.declared
            if not spec.policy.ignored and hasattr(value, spec.name)
        }
        if is_pydantic(type(value)):
            return _set_private(value.model_copy(update=_public(updates)), updates)

        clone = cp.copy(value)
        for name, converted in updates.items():
            object.__setattr__(clone, name, converted)
        return clone

    def zero_value(self, tp: Any) -> Any:
        """Zero value of a destination type.

        Raises:
            TypeNonCopyableError: If the type has no zero value.
        """
        info = type_info(tp)
        match info.kind:
            case Kind.ANY | Kind.POINTER | Kind.OPTIONAL:
                return None
            case Kind.BOOL | Kind.INT | Kind.FLOAT | Kind.STR | Kind.BYTES:
                return info.cls()
            case Kind.SEQUENCE:
                return _concrete(info.cls, list)()
            case Kind.MAPPING:
                return _concrete(info.cls, dict)()
            case Kind.RECORD:
                return self._zero_record(info.cls)
        raise TypeNonCopyableError(f"Type {_type_name(tp)} has no zero value")

    def _zero_record(self, cls: type) -> Any:
        descriptor = self.registry.describe(cls)
        # excluded fields hold None
        zeros = {
            spec.name: None if spec.policy.ignored else self.zero_value(spec.type)
            for spec in descriptor.declared
        }
        if is_pydantic(cls):
            model = cls.model_construct(**_public(zeros))  # type: ignore[attr-defined]
            return _set_private(model, zeros)

        record = cls.__new__(cls)
        for name, zero in zeros.items():
            object.__setattr__(record, name, zero)
        return record
