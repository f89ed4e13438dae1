"""Copy orchestration: record fields into a typed mapping.

Usage:
    @dataclass
    class Reading:
        sensor: int = copy_field("id")
        value: np.uint64 = np.uint64(0)
        raw: bytes = copy_field("-", default=b"")

    dst = Ptr.to(dict[str, np.int8])
    copy(dst, Ptr(reading))
    dst.value  # {"id": ..., "value": ...}

    # Or let the copier allocate the mapping
    data = to_map(reading, ignore_non_copyable_types(True), map_type=dict[str, Any])
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import MutableMapping
from functools import lru_cache
from typing import Any

from structcopy.config import CopierSettings, get_settings
from structcopy.copier.options import CopyConfig, Option, build_config
from structcopy.core.access import SourceValue, read_field, resolve_owner
from structcopy.core.convert import Converter, CopyabilityPolicy, default_policy
from structcopy.core.descriptor import FieldDescriptor, TypeDescriptorRegistry
from structcopy.core.guard import CycleGuard
from structcopy.core.types import Kind, Ptr, TypeInfo, is_record, is_string_like, type_info
from structcopy.errors import (
    CopyError,
    FieldRequireCopyingError,
    RequiredFieldUnaddressableError,
    TypeNonCopyableError,
    ValueUnaddressableError,
)

logger = logging.getLogger(__name__)

_SKIP = object()


def _new_mapping(info: TypeInfo) -> MutableMapping[Any, Any]:
    cls = dict if inspect.isabstract(info.cls) else info.cls
    return cls()  # type: ignore[no-any-return]


def _mapping_args(info: TypeInfo) -> tuple[Any, Any]:
    key_type, value_type = info.args
    # untyped keys, as in Ptr({}) or dict[Any, int], take the destination key strings
    if type_info(key_type).kind is Kind.ANY:
        key_type = str
    return key_type, value_type


class _CopyRun:
    """State of one top-level copy: configuration, cycle guard, converter."""

    def __init__(self, copier: Copier, config: CopyConfig):
        self.config = config
        self.registry = copier.registry
        self.guard = CycleGuard()
        self.converter = Converter(copier.policy, copier.registry, self.guard, self.build_mapping)

    def build_mapping(self, source: SourceValue, map_type: Any) -> dict[Any, Any]:
        """Build a fresh mapping of ``map_type`` from a nested record."""
        info = type_info(map_type)
        key_type, value_type = _mapping_args(info)
        if not is_string_like(key_type):
            raise TypeNonCopyableError(f"Mapping key type {key_type!r} is not string-like")
        mapping = _new_mapping(info)
        self.fill(mapping, source, key_type, value_type)
        return mapping  # type: ignore[return-value]

    def fill(
        self,
        mapping: MutableMapping[Any, Any],
        source: SourceValue,
        key_type: Any,
        value_type: Any,
    ) -> None:
        """Copy every non-excluded field of ``source`` into ``mapping``.

        Stops at the first unrecoverable failure, leaving ``mapping`` partially filled.
        """
        key_cls = type_info(key_type).cls
        descriptor = self.registry.describe(type(source.value))
        for field in descriptor.copyable_fields():
            converted = self._copy_field(field, source, value_type)
            if converted is _SKIP:
                continue
            mapping[key_cls(field.destination_key)] = converted

    def _copy_field(self, field: FieldDescriptor, source: SourceValue, value_type: Any) -> Any:
        try:
            owner = resolve_owner(source, field)
            if owner is None:
                return _SKIP
            value = read_field(owner, field.name, field.visibility, field, default=_SKIP)
        except ValueUnaddressableError as e:
            if field.required:
                raise RequiredFieldUnaddressableError(
                    f"Required field {field} is encapsulated and the source is not addressable",
                    field=field,
                ) from e
            logger.debug("Skipping field %s: source is not addressable", field)
            return _SKIP
        if value is _SKIP:
            if field.required:
                raise FieldRequireCopyingError(f"Required field {field} is unset", field=field)
            logger.debug("Skipping field %s: attribute is unset", field)
            return _SKIP

        try:
            return self.converter.convert(value, field.type, value_type, owner.addressable)
        except TypeNonCopyableError as e:
            if field.required:
                raise FieldRequireCopyingError(
                    f"Required field {field} could not be copied: {e}", field=field
                ) from e
            if field.encapsulated or self.config.ignore_non_copyable_types:
                logger.debug("Skipping field %s: %s", field, e)
                return _SKIP
            if e.field is None:
                e.field = field
            raise
        except CopyError as e:
            if field.required:
                raise FieldRequireCopyingError(
                    f"Required field {field} could not be copied: {e}", field=field
                ) from e
            raise


class Copier:
    """Copies records into typed mappings.

    Holds the pieces shared between calls: the copyability policy, the record
    descriptor cache and the default configuration. Each call gets its own
    cycle guard, so one Copier can serve concurrent calls on disjoint destinations.

    Args:
        policy: Copyability table. Defaults to ``default_policy()``.
        registry: Record descriptor cache. Defaults to a new registry using the
            settings' tag key.
        settings: Process defaults. Defaults to ``get_settings()``.
    """

    def __init__(
        self,
        policy: CopyabilityPolicy | None = None,
        registry: TypeDescriptorRegistry | None = None,
        settings: CopierSettings | None = None,
    ):
        settings = settings or get_settings()
        self.policy = policy or default_policy()
        self.registry = registry or TypeDescriptorRegistry(settings.tag_key)
        self.defaults = CopyConfig(ignore_non_copyable_types=settings.ignore_non_copyable_types)

    def copy(self, dst: Ptr[Any], src: Any, *options: Option) -> None:
        """Copy the fields of ``src`` into the mapping referenced by ``dst``.

        Args:
            dst: Ptr whose type is a mapping type, e.g. ``Ptr.to(dict[str, int])``. An
                untyped key, as in ``Ptr({})``, takes ``str`` keys.
                A ``None`` value is replaced by a new mapping.
            src: Record, or ``Ptr(record)`` to make encapsulated fields readable.
            *options: Per-call options such as ``ignore_non_copyable_types()``.

        Raises:
            TypeNonCopyableError: If a field or the mapping key type cannot be copied.
            FieldRequireCopyingError: If a field tagged ``required`` cannot be copied.
            ValueUnaddressableError: If a required encapsulated field is read from a
                source passed by value.
            ReferenceCycleError: If the source refers back to itself.
        """
        config = build_config(self.defaults, options)

        if not isinstance(dst, Ptr):
            raise TypeNonCopyableError(
                f"Destination must be a Ptr to a mapping, got {type(dst).__name__}"
            )
        dst_info = type_info(dst.type)
        if dst_info.kind is not Kind.MAPPING:
            raise TypeNonCopyableError(f"Destination type {dst.type!r} is not a mapping")
        if dst.value is not None and not isinstance(dst.value, MutableMapping):
            raise TypeNonCopyableError(
                f"Destination holds {type(dst.value).__name__}, not a mutable mapping"
            )

        key_type, value_type = _mapping_args(dst_info)
        if not is_string_like(key_type):
            if not config.ignore_non_copyable_types:
                raise TypeNonCopyableError(f"Mapping key type {key_type!r} is not string-like")
            logger.debug("Skipping copy: mapping key type %r is not string-like", key_type)
            if dst.value is None:
                dst.value = _new_mapping(dst_info)
            return

        if dst.value is None:
            dst.value = _new_mapping(dst_info)

        source = SourceValue.wrap(src)
        if source.value is None:
            return
        if not is_record(type(source.value)):
            if not config.ignore_non_copyable_types:
                raise TypeNonCopyableError(
                    f"Source {type(source.value).__name__} is not a dataclass or Pydantic model"
                )
            logger.debug("Skipping copy: source %s is not a record", type(source.value).__name__)
            return

        run = _CopyRun(self, config)
        with run.guard.visit(source.value):
            run.fill(dst.value, source, key_type, value_type)

    def to_map(self, src: Any, *options: Option, map_type: Any = dict[str, Any]) -> Any:
        """Copy ``src`` into a newly allocated mapping of ``map_type`` and return it."""
        dst: Ptr[Any] = Ptr.to(map_type)
        self.copy(dst, src, *options)
        return dst.value


@lru_cache(maxsize=1)
def get_copier() -> Copier:
    """Access the process-wide default Copier."""
    return Copier()


def copy(dst: Ptr[Any], src: Any, *options: Option) -> None:
    """Copy the fields of ``src`` into the mapping referenced by ``dst``.

    See ``Copier.copy``.
    """
    get_copier().copy(dst, src, *options)


def to_map(src: Any, *options: Option, map_type: Any = dict[str, Any]) -> Any:
    """Copy ``src`` into a new mapping of ``map_type``. See ``Copier.to_map``."""
    return get_copier().to_map(src, *options, map_type=map_type)
