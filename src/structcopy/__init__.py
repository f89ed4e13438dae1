"""structcopy: copy record fields into typed mappings.

Usage:
    from dataclasses import dataclass, field

    import numpy as np
    from structcopy import Ptr, copy, copy_field

    @dataclass
    class Sample:
        count: int = copy_field("n")
        level: np.uint64 = np.uint64(0)
        secret: str = copy_field("-", default="")
        _checksum: int = copy_field("checksum,required", default=0)

    dst = Ptr.to(dict[str, np.int8])
    copy(dst, Ptr(Sample(count=1, level=np.uint64(128))))
    dst.value  # {"n": 1, "level": -128, "checksum": 0}
"""

__version__ = "0.1.0"

# Copy operations
from structcopy.copier import (
    Copier,
    CopyConfig,
    Option,
    copy,
    get_copier,
    ignore_non_copyable_types,
    to_map,
)

# Configuration
from structcopy.config import CopierSettings, get_settings

# Building blocks
from structcopy.core import (
    DEFAULT_NON_COPYABLE,
    AnnotationPolicy,
    CopyabilityPolicy,
    FieldDescriptor,
    Ptr,
    TypeDescriptorRegistry,
    Visibility,
    copy_field,
    default_policy,
    parse_annotation,
)

# Errors
from structcopy.errors import (
    CopyError,
    FieldRequireCopyingError,
    ReferenceCycleError,
    RequiredFieldUnaddressableError,
    TypeNonCopyableError,
    ValueUnaddressableError,
)

__all__ = [
    # Version
    "__version__",
    # Copy
    "copy",
    "to_map",
    "Copier",
    "get_copier",
    "CopyConfig",
    "Option",
    "ignore_non_copyable_types",
    # Config
    "CopierSettings",
    "get_settings",
    # Core
    "Ptr",
    "copy_field",
    "parse_annotation",
    "AnnotationPolicy",
    "FieldDescriptor",
    "Visibility",
    "TypeDescriptorRegistry",
    "CopyabilityPolicy",
    "DEFAULT_NON_COPYABLE",
    "default_policy",
    # Errors
    "CopyError",
    "TypeNonCopyableError",
    "FieldRequireCopyingError",
    "ValueUnaddressableError",
    "RequiredFieldUnaddressableError",
    "ReferenceCycleError",
]
