"""Field tag parsing.

A tag is attached to a record field and controls how it is copied:

    @dataclass
    class User:
        id: int = field(metadata={"copy": "user_id,required"})
        password: str = copy_field("-")
        _token: str = copy_field("token")

Grammar: ``<key-override>[,<flag>...]``. A key override of ``-`` excludes
the field. Recognized flags: ``required``. Unknown flags are ignored.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

DEFAULT_TAG_KEY = "copy"
EMBED_KEY = "embed"
EXCLUDE = "-"


@dataclass(frozen=True, slots=True)
class AnnotationPolicy:
    """Parsed field tag."""

    key: str | None = None
    """Destination key override, None to use the declared field name."""

    required: bool = False
    """Copy must succeed even in tolerant mode."""

    ignored: bool = False
    """Field is excluded from copying entirely."""


def parse_annotation(raw: str | None) -> AnnotationPolicy:
    """Parse a field tag into a policy.

    Malformed input never raises; it degrades to the default policy.

    Args:
        raw: Tag string, or None when the field carries no tag.

    Returns:
        Parsed AnnotationPolicy.
    """
    if not raw or not isinstance(raw, str):
        return AnnotationPolicy()

    head, *flags = (token.strip() for token in raw.split(","))
    if head == EXCLUDE:
        return AnnotationPolicy(ignored=True)

    return AnnotationPolicy(
        key=head or None,
        required="required" in flags,
    )


def copy_field(
    tag: str | None = None,
    *,
    embed: bool = False,
    tag_key: str = DEFAULT_TAG_KEY,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field carrying a copy tag.

    Args:
        tag: Tag string, e.g. ``"key,required"`` or ``"-"``.
        embed: Promote the fields of this record-typed field to the enclosing level.
        tag_key: Metadata key the tag is stored under.
        **kwargs: Forwarded to ``dataclasses.field``.

    Returns:
        A dataclasses field specifier.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    if tag is not None:
        metadata[tag_key] = tag
    if embed:
        metadata[EMBED_KEY] = True
    return dataclasses.field(metadata=metadata, **kwargs)
