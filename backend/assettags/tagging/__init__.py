"""Pure tagging engine: keys, value model, synchronization and rendering."""

from assettags.tagging.bulk import apply_policy
from assettags.tagging.enums import BulkApplyPolicy, TagValueType
from assettags.tagging.keys import (
    CanonicalKey,
    PlainKey,
    TagKey,
    parse_key,
    resolve_key,
)
from assettags.tagging.models import AssetTag, TagFramework, TagTemplate
from assettags.tagging.render import (
    TagChip,
    TagDetail,
    render_tag_chips,
    render_tag_details,
)
from assettags.tagging.sync import synchronize
from assettags.tagging.values import default_for

__all__ = [
    # Types
    "AssetTag",
    "CanonicalKey",
    "PlainKey",
    "TagChip",
    "TagDetail",
    "TagFramework",
    "TagKey",
    "TagTemplate",
    # Enums
    "BulkApplyPolicy",
    "TagValueType",
    # Operations
    "apply_policy",
    "default_for",
    "parse_key",
    "render_tag_chips",
    "render_tag_details",
    "resolve_key",
    "synchronize",
]
