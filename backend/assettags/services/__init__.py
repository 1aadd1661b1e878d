"""Services for the asset tagging application."""

from assettags.services.asset_tags import AssetTagService
from assettags.services.bulk import BulkApplyService
from assettags.services.editor import TagEditSession
from assettags.services.frameworks import FrameworkRegistry

__all__ = [
    "AssetTagService",
    "BulkApplyService",
    "FrameworkRegistry",
    "TagEditSession",
]
