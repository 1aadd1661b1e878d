"""Tag keys.

A key is either a plain string typed by a user or a reference to a canonical
key record (``{id, title}``) owned by the organization. Both forms travel
through the system; :func:`resolve_key` is the one place that decides what
string a key stands for, and every key comparison goes through it.
"""

from __future__ import annotations

import random
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class PlainKey:
    """A free-form key, usually on a tag with no framework."""

    value: str


@dataclass(frozen=True)
class CanonicalKey:
    """A reference to a stored key definition."""

    id: str
    title: str
    hex: str | None = None


TagKey = Union[PlainKey, CanonicalKey]


def parse_key(raw: Any) -> TagKey | None:
    """Build a key variant from its wire or in-memory form.

    Accepts a string, a mapping with ``title`` and ``id`` (or ``_id``), or an
    existing variant. A mapping without an id is treated as a plain key.

    Returns:
        The key, or None when ``raw`` is empty or malformed.
    """
    if isinstance(raw, (PlainKey, CanonicalKey)):
        return raw
    if isinstance(raw, str):
        return PlainKey(raw) if raw else None
    if isinstance(raw, Mapping):
        title = raw.get("title")
        if not isinstance(title, str) or not title:
            return None
        key_id = raw.get("id") or raw.get("_id")
        if not key_id:
            return PlainKey(title)
        hex_color = raw.get("hex")
        return CanonicalKey(
            id=str(key_id),
            title=title,
            hex=hex_color if isinstance(hex_color, str) and hex_color else None,
        )
    return None


def resolve_key(key: Any) -> str:
    """Return the string a key stands for; empty for a missing key."""
    if isinstance(key, CanonicalKey):
        return key.title
    if isinstance(key, PlainKey):
        return key.value
    parsed = parse_key(key)
    return resolve_key(parsed) if parsed is not None else ""


def is_canonical(key: Any) -> bool:
    """Check whether a key refers to a stored key definition."""
    return isinstance(parse_key(key), CanonicalKey)


def key_to_wire(key: TagKey | None) -> str | dict[str, Any]:
    """Serialize a key to its wire form."""
    if isinstance(key, CanonicalKey):
        data: dict[str, Any] = {"id": key.id, "title": key.title}
        if key.hex:
            data["hex"] = key.hex
        return data
    if isinstance(key, PlainKey):
        return key.value
    return ""


def random_key_color() -> str:
    """Pick a color for a newly created key definition."""
    return f"#{random.randint(0, 0xFFFFFF):06X}"
