"""Database models for the asset tagging service."""

from assettags.db.models.app_setting import AppSetting
from assettags.db.models.file_tag import FileTag
from assettags.db.models.tag_framework import AssetTagFramework
from assettags.db.models.tag_key import AssetTagKey
from assettags.db.models.tag_template import AssetTagTemplate
from assettags.tagging.enums import BulkApplyPolicy, TagValueType

__all__ = [
    # Models
    "AppSetting",
    "AssetTagFramework",
    "AssetTagKey",
    "AssetTagTemplate",
    "FileTag",
    # Enums
    "BulkApplyPolicy",
    "TagValueType",
]
