"""Pydantic schemas for tag frameworks and asset tags."""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from assettags.tagging.keys import CanonicalKey, PlainKey, TagKey, key_to_wire, parse_key
from assettags.tagging.models import AssetTag, TagFramework, TagTemplate
from assettags.tagging.render import TagChip, TagDetail
from assettags.tagging.values import coerce_value, value_to_wire


class KeyRef(BaseModel):
    """Reference to a stored key."""

    id: Optional[str] = None
    title: str
    hex: Optional[str] = None


def key_from_schema(key: Union[str, KeyRef, None]) -> Optional[TagKey]:
    if isinstance(key, KeyRef):
        return parse_key(key.model_dump())
    return parse_key(key)


# ==================== Framework Schemas ====================


class TagTemplateSchema(BaseModel):
    """One field of a framework."""

    key: Union[str, KeyRef]
    value_type: str = "text"
    options: list[str] = []
    default_value: Any = None
    hex: Optional[str] = None

    def to_domain(self) -> TagTemplate:
        return TagTemplate(
            key=key_from_schema(self.key) or PlainKey(""),
            value_type=self.value_type,
            options=list(self.options),
            default_value=self.default_value,
            hex=self.hex,
        )

    @classmethod
    def from_domain(cls, template: TagTemplate) -> TagTemplateSchema:
        return cls(
            key=key_to_wire(template.key),
            value_type=template.value_type.value,
            options=list(template.options),
            default_value=value_to_wire(template.default_value),
            hex=template.hex,
        )


class TagFrameworkSchema(BaseModel):
    """A framework with its templates."""

    id: str
    name: str
    description: str = ""
    enabled: bool = True
    is_default: bool = False
    templates: list[TagTemplateSchema] = []

    @classmethod
    def from_domain(cls, framework: TagFramework) -> TagFrameworkSchema:
        return cls(
            id=framework.id,
            name=framework.name,
            description=framework.description,
            enabled=framework.enabled,
            is_default=framework.is_default,
            templates=[TagTemplateSchema.from_domain(t) for t in framework.templates],
        )


class FrameworkSaveRequest(BaseModel):
    """Request to create or replace a framework."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    enabled: bool = True
    templates: list[TagTemplateSchema] = []


class FrameworkListResponse(BaseModel):
    """Paginated framework list."""

    items: list[TagFrameworkSchema]
    total: int
    page: int
    page_size: int


class DefaultFrameworkRequest(BaseModel):
    """Request to set or clear the default framework."""

    framework_id: Optional[str] = None


class FrameworkRef(BaseModel):
    """Framework reference carried on a tag."""

    id: str
    name: Optional[str] = None


# ==================== Tag Schemas ====================


class AssetTagSchema(BaseModel):
    """A tag on the wire: ``{uuid, key, value, framework?}``."""

    uuid: Optional[str] = None
    key: Union[str, KeyRef]
    value: Any = None
    framework: Optional[FrameworkRef] = None

    @property
    def framework_id(self) -> Optional[str]:
        return self.framework.id if self.framework else None

    def to_domain(self, framework: Optional[TagFramework] = None) -> AssetTag:
        """Build a domain tag, converting the value to its template's type."""
        key = key_from_schema(self.key)
        value = self.value
        if framework is not None:
            template = framework.find_template(key)
            if template is not None:
                value = coerce_value(template.value_type, value)
        return AssetTag(uuid=self.uuid or "", key=key, value=value, framework=framework)

    @classmethod
    def from_domain(cls, tag: AssetTag) -> AssetTagSchema:
        framework = None
        if tag.framework is not None:
            framework = FrameworkRef(id=tag.framework.id, name=tag.framework.name)
        key: Union[str, KeyRef] = ""
        if isinstance(tag.key, CanonicalKey):
            key = KeyRef(id=tag.key.id, title=tag.key.title, hex=tag.key.hex)
        elif isinstance(tag.key, PlainKey):
            key = tag.key.value
        return cls(
            uuid=tag.uuid,
            key=key,
            value=value_to_wire(tag.value),
            framework=framework,
        )


class TagSetRequest(BaseModel):
    """Request carrying a complete tag set."""

    tags: list[AssetTagSchema] = []


class TagSetResponse(BaseModel):
    """A file's tag set."""

    file_id: str
    tags: list[AssetTagSchema]


class SyncRequest(BaseModel):
    """Request to instantiate a framework's missing templates on a file.

    When ``tags`` is given it is used as the current set instead of the
    saved one, so unsaved edits are taken into account.
    """

    framework_id: str
    tags: Optional[list[AssetTagSchema]] = None


class SyncResponse(BaseModel):
    """Tags created by synchronization. Nothing is saved."""

    file_id: str
    framework_id: str
    added: list[AssetTagSchema]


class BulkApplyRequest(BaseModel):
    """Request to apply one tag set to many files."""

    file_ids: list[str] = Field(..., min_length=1)
    tags: list[AssetTagSchema] = Field(..., min_length=1)
    policy: str = "merge"


class BulkApplyResponse(BaseModel):
    """Resulting tag set per file."""

    policy: str
    files: dict[str, list[AssetTagSchema]]


# ==================== Rendering Schemas ====================


class TagChipSchema(BaseModel):
    """A rendered chip."""

    label: str
    color: str
    kind: str = "tag"
    key: Optional[str] = None

    @classmethod
    def from_domain(cls, chip: TagChip) -> TagChipSchema:
        return cls(label=chip.label, color=chip.color, kind=chip.kind, key=chip.key)


class TagDetailSchema(BaseModel):
    """An untruncated tag row for the detail view."""

    title: str
    value: str
    color: str

    @classmethod
    def from_domain(cls, detail: TagDetail) -> TagDetailSchema:
        return cls(title=detail.title, value=detail.value, color=detail.color)


class RenderRequest(BaseModel):
    """Request to render tags as chips."""

    tags: list[AssetTagSchema] = []
    max_chips: Optional[int] = Field(None, ge=0)
    spread_array: bool = False
    show_no_tags_message: bool = True


class RenderResponse(BaseModel):
    """Rendered chips and detail rows."""

    chips: list[TagChipSchema]
    details: list[TagDetailSchema]
