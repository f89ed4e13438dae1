"""Value conversion: converter, numeric rules, copyability policy."""

from structcopy.core.convert.core import Converter, MappingBuilder
from structcopy.core.convert.numeric import convert_number, wrap_integer
from structcopy.core.convert.policy import (
    DEFAULT_NON_COPYABLE,
    CopyabilityPolicy,
    default_policy,
)

__all__ = [
    "Converter",
    "MappingBuilder",
    "convert_number",
    "wrap_integer",
    "CopyabilityPolicy",
    "DEFAULT_NON_COPYABLE",
    "default_policy",
]
