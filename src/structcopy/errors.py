"""Exceptions raised by copy operations.

All failures surface synchronously from ``copy``. Callers compare against the
classes below instead of parsing messages:

    try:
        copy(dst, src)
    except FieldRequireCopyingError as e:
        ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from structcopy.core.descriptor.models import FieldDescriptor


class CopyError(Exception):
    """Base class for copy failures.

    Args:
        message: Human readable description.
        field: Descriptor of the offending field, when one is known.
    """

    def __init__(self, message: str, field: FieldDescriptor | None = None):
        super().__init__(message)
        self.field = field


class TypeNonCopyableError(CopyError, TypeError):
    """Raised when a value cannot be converted to the destination type."""

    pass


class FieldRequireCopyingError(CopyError):
    """Raised when a field tagged ``required`` could not be copied."""

    pass


class ValueUnaddressableError(CopyError):
    """Raised when an encapsulated field is read from a source passed by value."""

    pass


class RequiredFieldUnaddressableError(FieldRequireCopyingError, ValueUnaddressableError):
    """A required encapsulated field on a source passed by value.

    Matches both ``FieldRequireCopyingError`` and ``ValueUnaddressableError``.
    """

    pass


class ReferenceCycleError(CopyError):
    """Raised when a value is reached again while it is still being copied."""

    pass
