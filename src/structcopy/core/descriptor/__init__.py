"""Record field descriptors: declared fields, flattening, caching."""

from structcopy.core.descriptor.core import (
    TypeDescriptorRegistry,
    declared_fields,
    embedded_record,
    resolve_shadowing,
)
from structcopy.core.descriptor.models import (
    EmbeddingStep,
    FieldDescriptor,
    FieldSpec,
    TypeDescriptor,
    Visibility,
)

__all__ = [
    # Models
    "Visibility",
    "EmbeddingStep",
    "FieldSpec",
    "FieldDescriptor",
    "TypeDescriptor",
    # Core
    "TypeDescriptorRegistry",
    "declared_fields",
    "embedded_record",
    "resolve_shadowing",
]
