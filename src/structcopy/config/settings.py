"""Configuration settings using Pydantic Settings.

Provides process-wide copy defaults with environment variable support.

Usage:
    from structcopy.config import CopierSettings, get_settings

    # Load from environment variables (STRUCTCOPY_*)
    settings = get_settings()

    # Or override with explicit values
    settings = CopierSettings(ignore_non_copyable_types=True)
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from structcopy.core.annotation import DEFAULT_TAG_KEY


class CopierSettings(BaseSettings):  # type: ignore[misc]
    """Process defaults for copy operations.

    Attributes:
        ignore_non_copyable_types: Default tolerant mode; per-call options override it.
        tag_key: Field metadata key holding copy tags.

    Environment Variables:
        STRUCTCOPY_IGNORE_NON_COPYABLE_TYPES
        STRUCTCOPY_TAG_KEY
    """

    model_config = SettingsConfigDict(
        env_prefix="STRUCTCOPY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ignore_non_copyable_types: bool = False
    tag_key: str = DEFAULT_TAG_KEY


@lru_cache(maxsize=1)
def get_settings() -> CopierSettings:
    """Load settings once per process."""
    return CopierSettings()
