"""In-memory domain types for frameworks, templates and asset tags."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any

from assettags.tagging.enums import TagValueType
from assettags.tagging.keys import TagKey, resolve_key


@dataclass
class TagTemplate:
    """One field definition within a framework."""

    key: TagKey
    value_type: TagValueType = TagValueType.TEXT
    options: list[str] = field(default_factory=list)
    default_value: Any = None
    hex: str | None = None

    @property
    def resolved_key(self) -> str:
        return resolve_key(self.key)


@dataclass
class TagFramework:
    """A named, organization-owned tag schema."""

    id: str
    name: str
    templates: list[TagTemplate] = field(default_factory=list)
    description: str = ""
    enabled: bool = True
    is_default: bool = False

    def find_template(self, key: Any) -> TagTemplate | None:
        """Return the first template whose key resolves like ``key``."""
        wanted = resolve_key(key)
        if not wanted:
            return None
        for template in self.templates or []:
            if template.resolved_key == wanted:
                return template
        return None


@dataclass
class AssetTag:
    """A tag instance attached to a file.

    ``framework`` is carried by value for tags created from a framework so
    editors and renderers can recover field constraints without a lookup.
    """

    uuid: str
    key: TagKey | None
    value: Any = None
    framework: TagFramework | None = None

    @property
    def resolved_key(self) -> str:
        return resolve_key(self.key)

    @property
    def template(self) -> TagTemplate | None:
        if self.framework is None:
            return None
        return self.framework.find_template(self.key)

    def copy(self, **changes: Any) -> AssetTag:
        """Return a shallow copy with ``changes`` applied."""
        return replace(self, **changes)


def new_tag_id() -> str:
    """Generate a client-side identifier for a new tag."""
    return str(uuid.uuid4())
