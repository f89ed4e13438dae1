"""Cycle detection for self-referential value graphs."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from structcopy.errors import ReferenceCycleError


class CycleGuard:
    """Tracks values currently being converted, scoped to one top-level copy.

    Identities are removed again when their conversion finishes, so values shared
    by several branches of an acyclic graph are copied once per branch.
    """

    def __init__(self) -> None:
        self._visiting: set[int] = set()

    @contextmanager
    def visit(self, value: Any) -> Iterator[None]:
        """Mark a value as in progress for the duration of the block.

        Raises:
            ReferenceCycleError: If the value is already being converted.
        """
        key = id(value)
        if key in self._visiting:
            raise ReferenceCycleError(
                f"Reference cycle detected at {type(value).__name__} object {key:#x}"
            )
        self._visiting.add(key)
        try:
            yield
        finally:
            self._visiting.discard(key)

    def __contains__(self, value: Any) -> bool:
        return id(value) in self._visiting

    def __len__(self) -> int:
        return len(self._visiting)
