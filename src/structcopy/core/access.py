"""Field access with explicit addressability.

A record is addressable when the caller handed it over by reference
(``Ptr(record)``) or when it was reached by dereferencing a ``Ptr``. Only
addressable records expose their encapsulated (underscore) fields.

Usage:
    source = SourceValue.wrap(Ptr(user))
    owner = resolve_owner(source, descriptor)
    if owner is not None:
        value = read_field(owner, descriptor.name, descriptor.visibility, descriptor)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from structcopy.core.descriptor.models import FieldDescriptor, Visibility
from structcopy.core.types import Ptr
from structcopy.errors import ValueUnaddressableError


@dataclass(frozen=True, slots=True)
class SourceValue:
    """A record value paired with its addressability."""

    value: Any
    addressable: bool = False

    @classmethod
    def wrap(cls, value: Any) -> SourceValue:
        """Build a SourceValue, dereferencing a Ptr into an addressable value."""
        if isinstance(value, Ptr):
            return cls(value.value, addressable=True)
        return cls(value, addressable=False)


_MISSING = object()


def read_field(
    source: SourceValue,
    name: str,
    visibility: Visibility,
    descriptor: FieldDescriptor | None = None,
    default: Any = _MISSING,
) -> Any:
    """Read one attribute of a record.

    Args:
        source: Record holding the field.
        name: Attribute name.
        visibility: Visibility of the attribute.
        descriptor: Field being copied, attached to errors for diagnostics.
        default: Returned when the attribute is unset, e.g. a Pydantic private
            attribute without a default. Without it, AttributeError propagates.

    Returns:
        The attribute value.

    Raises:
        ValueUnaddressableError: If the field is encapsulated and the source is not addressable.
    """
    if visibility is Visibility.ENCAPSULATED and not source.addressable:
        raise ValueUnaddressableError(
            f"Cannot read encapsulated field {name!r} of {type(source.value).__name__} "
            f"passed by value; pass Ptr(source) instead",
            field=descriptor,
        )
    if default is _MISSING:
        return getattr(source.value, name)
    return getattr(source.value, name, default)


def resolve_owner(source: SourceValue, descriptor: FieldDescriptor) -> SourceValue | None:
    """Walk a descriptor's nesting path down to the record declaring the field.

    Args:
        source: Top-level record.
        descriptor: Field to locate.

    Returns:
        The declaring record, or None if a nil indirection cut the path.

    Raises:
        ValueUnaddressableError: If an encapsulated embedding field is crossed on a
            non-addressable record.
    """
    current = source
    for step in descriptor.nesting_path:
        value = read_field(current, step.name, step.visibility, descriptor)
        if value is None:
            return None
        if isinstance(value, Ptr):
            if value.value is None:
                return None
            current = SourceValue(value.value, addressable=True)
        else:
            current = SourceValue(value, addressable=current.addressable)
    return current
