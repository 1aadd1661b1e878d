"""Editing session for one file's tag set.

Holds the working copy of the tags while a user edits them, and decides
which asynchronous framework responses are still wanted.
"""

from __future__ import annotations

from typing import Any

from assettags.core.exceptions import NotFoundError, TaggingError, ValidationError
from assettags.core.logging import get_logger
from assettags.services.asset_tags import AssetTagService
from assettags.services.frameworks import FrameworkRegistry
from assettags.tagging.enums import TagValueType
from assettags.tagging.keys import parse_key
from assettags.tagging.models import AssetTag, TagFramework, new_tag_id
from assettags.tagging.sync import synchronize
from assettags.tagging.values import coerce_value, with_added_option

logger = get_logger(__name__)


class TagEditSession:
    """Working copy of a file's tags.

    Changes stay in memory until :meth:`save`. Framework selections are
    tracked by request: only the response to the most recent
    :meth:`apply_framework` call is applied, whatever order responses
    arrive in.
    """

    def __init__(
        self,
        file_id: str,
        registry: FrameworkRegistry,
        tag_service: AssetTagService,
    ):
        self.file_id = file_id
        self.registry = registry
        self.tag_service = tag_service
        self.tags: list[AssetTag] = []
        self.framework: TagFramework | None = None
        self.dirty = False
        self._request_seq = 0

    async def load(self) -> list[AssetTag]:
        """Load the file's saved tags into the session."""
        self.tags = await self.tag_service.get_tags(self.file_id)
        self.dirty = False
        return self.tags

    def add_tag(self, key: Any = "", value: Any = "") -> AssetTag:
        """Append a free-form text tag."""
        tag = AssetTag(uuid=new_tag_id(), key=parse_key(key), value=value)
        self.tags.append(tag)
        self.dirty = True
        return tag

    def remove_tag(self, tag_uuid: str) -> None:
        tag = self._find(tag_uuid)
        self.tags.remove(tag)
        self.dirty = True

    def set_value(self, tag_uuid: str, value: Any) -> AssetTag:
        """Set a tag's value, converted to its template's type."""
        tag = self._find(tag_uuid)
        template = tag.template
        tag.value = coerce_value(template.value_type, value) if template else value
        self.dirty = True
        return tag

    def rename_key(self, tag_uuid: str, key: Any) -> AssetTag:
        """Change the key of a free-form tag.

        Raises:
            ValidationError: If the tag belongs to a framework.
        """
        tag = self._find(tag_uuid)
        if tag.framework is not None:
            raise ValidationError(
                f"Tag '{tag.resolved_key}' comes from framework "
                f"'{tag.framework.name}' and cannot be renamed",
                key=tag.resolved_key,
            )
        tag.key = parse_key(key)
        self.dirty = True
        return tag

    def add_option(self, tag_uuid: str, option: str) -> AssetTag:
        """Add a new option to a multiselect tag's value.

        The framework's option list is left as it is.
        """
        tag = self._find(tag_uuid)
        template = tag.template
        if template is None or template.value_type != TagValueType.MULTISELECT:
            raise ValidationError(
                f"Tag '{tag.resolved_key}' does not accept new options",
                key=tag.resolved_key,
            )
        tag.value = with_added_option(tag.value, option)
        self.dirty = True
        return tag

    async def apply_framework(self, framework_id: str) -> list[AssetTag]:
        """Fetch a framework and add tags for the templates not yet present.

        Returns:
            The tags added, or an empty list when a newer selection was made
            while this one was being fetched.
        """
        self._request_seq += 1
        ticket = self._request_seq

        try:
            framework = await self.registry.fetch_framework(framework_id)
        except TaggingError as exc:
            if ticket != self._request_seq:
                logger.info(
                    "stale_framework_response_discarded",
                    file_id=self.file_id,
                    framework_id=framework_id,
                    error=exc.message,
                )
                return []
            raise

        if ticket != self._request_seq:
            logger.info(
                "stale_framework_response_discarded",
                file_id=self.file_id,
                framework_id=framework_id,
            )
            return []

        added = synchronize(self.tags, framework)
        self.tags.extend(added)
        self.framework = framework
        if added:
            self.dirty = True

        logger.debug(
            "framework_applied",
            file_id=self.file_id,
            framework_id=framework_id,
            added=len(added),
        )
        return added

    async def save(self) -> list[AssetTag]:
        """Validate and persist the working copy.

        Raises:
            ValidationError: If any tag is invalid. The session is unchanged.
        """
        self.tags = await self.tag_service.persist_tags(self.file_id, self.tags)
        self.dirty = False
        return self.tags

    def _find(self, tag_uuid: str) -> AssetTag:
        for tag in self.tags:
            if tag.uuid == tag_uuid:
                return tag
        raise NotFoundError("Tag", tag_uuid)
