"""Commit-time validation of tag sets."""

from __future__ import annotations

from collections.abc import Iterable

from assettags.core.exceptions import ValidationError
from assettags.tagging.enums import TagValueType
from assettags.tagging.models import AssetTag
from assettags.tagging.values import coerce_value_type, conforms, is_empty_value


def validate_tag(tag: AssetTag) -> None:
    """Check that a single tag can be saved.

    Raises:
        ValidationError: Naming the tag's resolved key.
    """
    key = tag.resolved_key
    if not key:
        raise ValidationError("Tag is missing a key")

    if is_empty_value(tag.value):
        raise ValidationError(
            f"Tag '{key}' is missing a value. Remove the tag if it should be left empty.",
            key=key,
        )

    template = tag.template
    if template is not None:
        value_type = coerce_value_type(template.value_type)
        if not conforms(value_type, tag.value, template.options):
            raise ValidationError(
                f"Tag '{key}' does not hold a valid {value_type.value} value",
                key=key,
            )
    elif not conforms(TagValueType.TEXT, tag.value):
        raise ValidationError(f"Tag '{key}' must hold a text value", key=key)


def validate_tag_set(tags: Iterable[AssetTag]) -> None:
    """Validate every tag in a set, stopping at the first failure."""
    for tag in tags:
        validate_tag(tag)
