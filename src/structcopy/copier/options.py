"""Per-call copy configuration and options.

Usage:
    copy(dst, src, ignore_non_copyable_types(True))
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CopyConfig:
    """Configuration of one copy call. Read-only while the copy runs."""

    ignore_non_copyable_types: bool = False
    """Skip fields (or the whole copy) whose types cannot be converted instead of failing.

    Fields tagged ``required`` still fail.
    """


type Option = Callable[[CopyConfig], CopyConfig]
"""Transforms a CopyConfig; options are applied in call order."""


def ignore_non_copyable_types(enabled: bool = True) -> Option:
    """Tolerate type incompatibilities by skipping the affected field or mapping.

    Args:
        enabled: Whether the tolerant mode is on.

    Returns:
        Option setting ``CopyConfig.ignore_non_copyable_types``.
    """

    def apply(config: CopyConfig) -> CopyConfig:
        return dataclasses.replace(config, ignore_non_copyable_types=enabled)

    return apply


def build_config(base: CopyConfig, options: Iterable[Option]) -> CopyConfig:
    config = base
    for option in options:
        config = option(config)
    return config
