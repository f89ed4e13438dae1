"""Record type introspection and field flattening.

Usage:
    registry = TypeDescriptorRegistry()
    descriptor = registry.describe(User)
    for field in descriptor.copyable_fields():
        ...
"""

from __future__ import annotations

import dataclasses
import inspect
import typing
from typing import Any

from structcopy.core.annotation import (
    DEFAULT_TAG_KEY,
    EMBED_KEY,
    AnnotationPolicy,
    parse_annotation,
)
from structcopy.core.descriptor.models import (
    EmbeddingStep,
    FieldDescriptor,
    FieldSpec,
    TypeDescriptor,
    Visibility,
)
from structcopy.core.types import Kind, is_pydantic, is_record, type_info
from structcopy.errors import TypeNonCopyableError


def _resolve_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, localns={cls.__name__: cls}, include_extras=True)
    except NameError as e:
        raise TypeNonCopyableError(f"Cannot resolve type hints of {cls.__qualname__}: {e}") from e


def _model_hints(cls: type) -> dict[str, Any]:
    # only user classes; pydantic's own annotations may name TYPE_CHECKING imports
    hints: dict[str, Any] = {}
    for base in reversed(cls.__mro__):
        if base.__module__.startswith("pydantic") or not is_pydantic(base):
            continue
        try:
            hints.update(
                inspect.get_annotations(base, locals={cls.__name__: cls}, eval_str=True)
            )
        except NameError as e:
            raise TypeNonCopyableError(
                f"Cannot resolve type hints of {cls.__qualname__}: {e}"
            ) from e
    return hints


def _dataclass_fields(cls: type, tag_key: str) -> list[FieldSpec]:
    hints = _resolve_hints(cls)
    specs = []
    for f in dataclasses.fields(cls):
        specs.append(
            FieldSpec(
                name=f.name,
                type=hints.get(f.name, f.type),
                policy=parse_annotation(f.metadata.get(tag_key)),
                visibility=Visibility.of(f.name),
                embedded=bool(f.metadata.get(EMBED_KEY, False)),
            )
        )
    return specs


def _pydantic_fields(cls: type, tag_key: str) -> list[FieldSpec]:
    """Model fields followed by private attributes.

    Pydantic rejects underscore field names, so the encapsulated fields of a
    model are its private attributes. They carry no tags and use the default
    policy: keyed by attribute name, not required.
    """
    specs = []
    for name, info in cls.model_fields.items():  # type: ignore[attr-defined]
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        specs.append(
            FieldSpec(
                name=name,
                type=info.annotation,
                policy=parse_annotation(extra.get(tag_key)),  # type: ignore[arg-type]
                visibility=Visibility.of(name),
                embedded=bool(extra.get(EMBED_KEY, False)),
            )
        )

    private = getattr(cls, "__private_attributes__", {})
    if private:
        hints = _model_hints(cls)
        for name in private:
            specs.append(
                FieldSpec(
                    name=name,
                    type=hints.get(name, Any),
                    policy=AnnotationPolicy(),
                    visibility=Visibility.ENCAPSULATED,
                )
            )
    return specs


def declared_fields(cls: type, tag_key: str = DEFAULT_TAG_KEY) -> list[FieldSpec]:
    """List the fields declared on a dataclass or Pydantic model.

    Args:
        cls: Record class.
        tag_key: Metadata key holding field tags.

    Returns:
        Field specs in declaration order.

    Raises:
        TypeNonCopyableError: If cls is not a record type or its hints cannot be resolved.
    """
    if is_pydantic(cls):
        return _pydantic_fields(cls, tag_key)
    if is_record(cls):
        return _dataclass_fields(cls, tag_key)
    raise TypeNonCopyableError(f"{cls!r} is not a dataclass or Pydantic model")


def embedded_record(tp: Any) -> type | None:
    """Return the record class an embedding field refers to, through Ptr/Optional."""
    info = type_info(tp)
    while info.kind in (Kind.POINTER, Kind.OPTIONAL):
        info = type_info(info.elem)
    return info.cls if info.kind is Kind.RECORD else None


def _flatten(
    cls: type,
    tag_key: str,
    path: tuple[EmbeddingStep, ...],
    seen: frozenset[type],
) -> list[FieldDescriptor]:
    flattened: list[FieldDescriptor] = []
    for spec in declared_fields(cls, tag_key):
        if spec.embedded and not spec.policy.ignored:
            target = embedded_record(spec.type)
            if target is not None and target not in seen:
                step = EmbeddingStep(spec.name, spec.visibility, spec.type)
                flattened.extend(_flatten(target, tag_key, (*path, step), seen | {target}))
                continue

        flattened.append(
            FieldDescriptor(
                name=spec.name,
                destination_key="" if spec.policy.ignored else spec.policy.key or spec.name,
                required=spec.policy.required,
                ignored=spec.policy.ignored,
                visibility=spec.visibility,
                nesting_path=path,
                type=spec.type,
            )
        )
    return flattened


def resolve_shadowing(fields: list[FieldDescriptor]) -> tuple[FieldDescriptor, ...]:
    """Drop fields hidden by a same-named field at a shallower embedding depth.

    At equal depth the first field in enumeration order wins.
    """
    winners: dict[str, int] = {}
    for index, f in enumerate(fields):
        current = winners.get(f.name)
        if current is None or f.depth < fields[current].depth:
            winners[f.name] = index
    keep = set(winners.values())
    return tuple(f for index, f in enumerate(fields) if index in keep)


class TypeDescriptorRegistry:
    """Process-local cache of record type descriptors.

    Descriptors are immutable once built, so concurrent readers need no locking.
    A type described twice by racing threads yields equal descriptors.

    Args:
        tag_key: Metadata key holding field tags.
    """

    def __init__(self, tag_key: str = DEFAULT_TAG_KEY) -> None:
        """Initialize empty registry."""
        self.tag_key = tag_key
        self._by_type: dict[type, TypeDescriptor] = {}

    def describe(self, cls: type) -> TypeDescriptor:
        """Get the descriptor of a record type, building it on first use.

        Args:
            cls: Dataclass or Pydantic model class.

        Returns:
            Cached TypeDescriptor.

        Raises:
            TypeNonCopyableError: If cls is not a record type.
        """
        descriptor = self._by_type.get(cls)
        if descriptor is not None:
            return descriptor

        descriptor = TypeDescriptor(
            record_type=cls,
            declared=tuple(declared_fields(cls, self.tag_key)),
            fields=resolve_shadowing(_flatten(cls, self.tag_key, (), frozenset({cls}))),
        )
        self._by_type[cls] = descriptor
        return descriptor

    def is_registered(self, cls: type) -> bool:
        return cls in self._by_type

    def clear(self) -> None:
        self._by_type.clear()
