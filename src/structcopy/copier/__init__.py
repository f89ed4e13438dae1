"""Copy orchestration.

Architecture Note:
    copier/ owns per-call state (configuration, cycle guard) and is the only
    place destination mappings are mutated. Conversion itself lives in core/.
"""

from structcopy.copier.copier import Copier, copy, get_copier, to_map
from structcopy.copier.options import (
    CopyConfig,
    Option,
    build_config,
    ignore_non_copyable_types,
)

__all__ = [
    "Copier",
    "copy",
    "to_map",
    "get_copier",
    "CopyConfig",
    "Option",
    "build_config",
    "ignore_non_copyable_types",
]
