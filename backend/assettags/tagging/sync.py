"""Framework synchronization.

Computes the tags a file needs so that every template of a framework is
represented, without duplicating templates the file already covers.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime

from assettags.tagging.keys import PlainKey, resolve_key
from assettags.tagging.models import AssetTag, TagFramework, new_tag_id
from assettags.tagging.values import default_for


def present_keys(tags: Iterable[AssetTag]) -> set[str]:
    """Resolve the keys of ``tags`` into a membership set."""
    keys: set[str] = set()
    for tag in tags or []:
        resolved = resolve_key(getattr(tag, "key", None))
        if resolved:
            keys.add(resolved)
    return keys


def synchronize(
    existing_tags: Iterable[AssetTag] | None,
    framework: TagFramework | None,
    now: datetime | None = None,
    id_factory: Callable[[], str] | None = None,
) -> list[AssetTag]:
    """Build the tags to append so ``framework`` is fully represented.

    Existing tags are matched by resolved key only, so two existing tags
    that collide on a key both count as present. The returned tags are in
    template order and each carries the full framework.

    Args:
        existing_tags: The file's current tags.
        framework: The framework to apply.
        now: Timestamp used for date defaults.
        id_factory: Generator for new tag identifiers.

    Returns:
        New tags for the caller to append; empty when nothing is missing.
    """
    if framework is None or not framework.templates:
        return []

    make_id = id_factory or new_tag_id
    seen = present_keys(existing_tags or [])
    new_tags: list[AssetTag] = []

    for template in framework.templates:
        resolved = template.resolved_key
        if not resolved or resolved in seen:
            continue
        # Guards against a framework repeating a key
        seen.add(resolved)
        value = default_for(template, now=now)
        if isinstance(value, list):
            # Never share a list with the template
            value = list(value)
        new_tags.append(
            AssetTag(
                uuid=make_id(),
                key=PlainKey(resolved),
                value=value,
                framework=framework,
            )
        )

    return new_tags
