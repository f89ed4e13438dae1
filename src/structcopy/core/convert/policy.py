"""Copyability policy: which types are opaque and never copied.

The table maps classes to a copyable flag. Lookups walk the MRO, so the most
specific registered class decides. New opaque types are added without touching
the converter:

    policy = default_policy()
    policy.set(MyHandle, copyable=False)
    Copier(policy=policy).copy(dst, src)
"""

from __future__ import annotations

import asyncio
import ctypes
import io
import queue
import socket
import threading
import types
from collections.abc import Callable, Mapping
from typing import Any

from structcopy.core.types import underlying

DEFAULT_NON_COPYABLE: tuple[type, ...] = (
    # raw memory handles
    ctypes.c_void_p,
    ctypes.c_char_p,
    ctypes.c_wchar_p,
    ctypes._Pointer,
    ctypes._CFuncPtr,  # type: ignore[attr-defined]
    memoryview,
    # function values
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    Callable,  # type: ignore[arg-type]
    # channels and execution state
    queue.Queue,
    asyncio.Queue,
    types.GeneratorType,
    types.CoroutineType,
    types.AsyncGeneratorType,
    type(threading.Lock()),
    type(threading.RLock()),
    # live resources
    io.IOBase,
    socket.socket,
)


class CopyabilityPolicy:
    """Classification table of copyable and non-copyable types.

    Args:
        table: Initial class to copyable-flag entries.
    """

    def __init__(self, table: Mapping[type, bool] | None = None) -> None:
        self._table: dict[type, bool] = dict(table or {})

    def set(self, cls: type, copyable: bool) -> None:
        """Register a class as copyable or not, overriding inherited entries."""
        self._table[cls] = copyable

    def is_copyable(self, tp: Any) -> bool:
        """Check a type hint or class against the table.

        Unregistered classes are copyable.
        """
        tp = underlying(tp)
        cls = getattr(tp, "__origin__", None) or tp
        if not isinstance(cls, type):
            return True
        for base in cls.__mro__:
            if base in self._table:
                return self._table[base]
        return True

    def copy(self) -> CopyabilityPolicy:
        return CopyabilityPolicy(self._table)

    def __contains__(self, cls: type) -> bool:
        return cls in self._table


def default_policy() -> CopyabilityPolicy:
    """Build a policy marking ``DEFAULT_NON_COPYABLE`` types as opaque."""
    return CopyabilityPolicy({cls: False for cls in DEFAULT_NON_COPYABLE})
