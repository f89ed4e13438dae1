"""Core functionalities: type classification, field descriptors, conversion.

Architecture Note:
    core/ contains the stateless building blocks of a copy. Per-call state
    (configuration, cycle tracking) lives in copier/.
"""

from structcopy.core.access import SourceValue, read_field, resolve_owner
from structcopy.core.annotation import AnnotationPolicy, copy_field, parse_annotation
from structcopy.core.convert import (
    DEFAULT_NON_COPYABLE,
    Converter,
    CopyabilityPolicy,
    default_policy,
)
from structcopy.core.descriptor import (
    EmbeddingStep,
    FieldDescriptor,
    TypeDescriptor,
    TypeDescriptorRegistry,
    Visibility,
)
from structcopy.core.guard import CycleGuard
from structcopy.core.types import Dynamic, Kind, Ptr, TypeInfo, is_string_like, type_info

__all__ = [
    # Types
    "Ptr",
    "Dynamic",
    "Kind",
    "TypeInfo",
    "type_info",
    "is_string_like",
    # Annotation
    "AnnotationPolicy",
    "parse_annotation",
    "copy_field",
    # Descriptor
    "Visibility",
    "EmbeddingStep",
    "FieldDescriptor",
    "TypeDescriptor",
    "TypeDescriptorRegistry",
    # Access
    "SourceValue",
    "read_field",
    "resolve_owner",
    # Conversion
    "Converter",
    "CopyabilityPolicy",
    "DEFAULT_NON_COPYABLE",
    "default_policy",
    "CycleGuard",
]
