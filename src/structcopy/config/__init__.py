"""Configuration module using Pydantic Settings.

Usage:
    from structcopy.config import CopierSettings

    settings = CopierSettings(tag_key="json")
"""

from structcopy.config.settings import CopierSettings, get_settings

__all__ = [
    "CopierSettings",
    "get_settings",
]
