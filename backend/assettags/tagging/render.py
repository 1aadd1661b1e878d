"""Tag flattening and rendering.

Turns a file's heterogeneous tag set into a bounded list of colored display
chips. Two presentations are supported:

- grouped: one ``"Title: value"`` chip per tag
- exploded: one bare-value chip per scalar, or per element of a list value

Both honor an optional chip limit, replacing whatever does not fit with a
single ``"+N more"`` chip. Nothing in here raises; malformed tags are
skipped as if they had no value.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Literal

from assettags.tagging.keys import CanonicalKey, is_canonical, parse_key, resolve_key
from assettags.tagging.models import AssetTag
from assettags.tagging.values import is_empty_value

MAX_LABEL_LENGTH = 40
TRUNCATION_SUFFIX = "..."
FALLBACK_COLOR = "#767676"
NO_TAGS_LABEL = "No associated tags"

ChipKind = Literal["tag", "overflow", "placeholder"]


@dataclass(frozen=True)
class TagChip:
    """A single display chip."""

    label: str
    color: str
    kind: ChipKind = "tag"
    key: str | None = None


@dataclass(frozen=True)
class TagDetail:
    """A full, untruncated tag row for the detail view."""

    title: str
    value: str
    color: str


def format_value(value: Any) -> str:
    """Stringify a tag value for display."""
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(v) for v in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if value is None:
        return ""
    return str(value)


def truncate_label(label: str, max_length: int = MAX_LABEL_LENGTH) -> str:
    """Cut ``label`` to ``max_length`` characters, marking the cut."""
    if len(label) <= max_length:
        return label
    return label[:max_length] + TRUNCATION_SUFFIX


def collation_key(text: str) -> tuple[str, str, str]:
    """Sort key approximating a locale-aware, case-sensitive comparison.

    Letters compare alphabetically first, then by accent, then by case with
    lowercase before uppercase, so ``"beta"`` sorts before ``"Gamma"`` and
    ``"apple"`` before ``"Apple"``.
    """
    decomposed = unicodedata.normalize("NFKD", text.casefold())
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return base, decomposed, text.swapcase()


def sort_tags(tags: Iterable[AssetTag]) -> list[AssetTag]:
    """Order tags by canonical title.

    Tags with canonical keys are sorted by title among the positions they
    occupy. Tags with plain keys compare equal to everything, so they keep
    their positions and their relative order.
    """
    ordered = list(tags)
    positions = [
        i for i, tag in enumerate(ordered) if is_canonical(getattr(tag, "key", None))
    ]
    by_title = sorted(
        (ordered[i] for i in positions),
        key=lambda tag: collation_key(resolve_key(tag.key)),
    )
    for position, tag in zip(positions, by_title):
        ordered[position] = tag
    return ordered


def tag_color(tag: AssetTag) -> str:
    """Pick the chip color for a tag.

    The originating template's color wins, then the canonical key's own
    color; anything else renders gray.
    """
    framework = getattr(tag, "framework", None)
    if framework is not None:
        template = framework.find_template(tag.key)
        if template is not None and template.hex:
            return template.hex
    key = parse_key(getattr(tag, "key", None))
    if isinstance(key, CanonicalKey) and key.hex:
        return key.hex
    return FALLBACK_COLOR


def _displayable(tags: Iterable[AssetTag] | None) -> Iterator[tuple[AssetTag, str]]:
    for tag in sort_tags(tags or []):
        title = resolve_key(getattr(tag, "key", None))
        if not title:
            continue
        if is_empty_value(getattr(tag, "value", None)):
            continue
        yield tag, title


def flatten_tags(
    tags: Iterable[AssetTag] | None,
    spread_array: bool = False,
    max_label_length: int | None = MAX_LABEL_LENGTH,
) -> list[TagChip]:
    """Produce every chip for ``tags`` without applying a limit.

    Args:
        tags: The tag set to flatten.
        spread_array: Emit one bare-value chip per list element instead of
            one titled chip per tag.
        max_label_length: Truncation length for labels; None disables it.
    """

    def fit(label: str) -> str:
        if max_label_length is None:
            return label
        return truncate_label(label, max_label_length)

    chips: list[TagChip] = []
    for tag, title in _displayable(tags):
        color = tag_color(tag)
        if spread_array:
            values = tag.value if isinstance(tag.value, (list, tuple)) else [tag.value]
            for value in values:
                chips.append(
                    TagChip(label=fit(format_value(value)), color=color, key=title)
                )
        else:
            label = f"{title}: {format_value(tag.value)}"
            chips.append(TagChip(label=fit(label), color=color, key=title))
    return chips


def render_tag_chips(
    tags: Iterable[AssetTag] | None,
    max_chips: int | None = None,
    spread_array: bool = False,
    show_no_tags_message: bool = True,
    max_label_length: int | None = MAX_LABEL_LENGTH,
) -> list[TagChip]:
    """Render a compact, bounded chip summary of a tag set.

    Args:
        tags: The tag set to render.
        max_chips: Maximum number of tag chips; None means no limit.
        spread_array: Use the exploded presentation.
        show_no_tags_message: Emit a placeholder chip when nothing has a value.
        max_label_length: Truncation length for labels; None disables it.

    Returns:
        Tag chips, followed by a ``"+N more"`` chip when some were elided.
    """
    chips = flatten_tags(tags, spread_array=spread_array, max_label_length=max_label_length)

    if not chips:
        if show_no_tags_message:
            return [TagChip(label=NO_TAGS_LABEL, color=FALLBACK_COLOR, kind="placeholder")]
        return []

    if max_chips is None or len(chips) <= max_chips:
        return chips

    limit = max(max_chips, 0)
    elided = len(chips) - limit
    return chips[:limit] + [
        TagChip(label=f"+{elided} more", color=FALLBACK_COLOR, kind="overflow")
    ]


def render_tag_details(tags: Iterable[AssetTag] | None) -> list[TagDetail]:
    """List every displayable tag with its full value."""
    return [
        TagDetail(title=title, value=format_value(tag.value), color=tag_color(tag))
        for tag, title in _displayable(tags)
    ]
