"""Bulk apply: one tag set written to many files in a single request."""

from __future__ import annotations

from collections.abc import Iterable

from assettags.core.exceptions import ValidationError
from assettags.core.logging import get_logger
from assettags.services.asset_tags import AssetTagService
from assettags.tagging.enums import BulkApplyPolicy
from assettags.tagging.models import AssetTag
from assettags.tagging.validation import validate_tag_set

logger = get_logger(__name__)


class BulkApplyService:
    """Applies a tag set to a selection of files under a conflict policy."""

    def __init__(self, tag_service: AssetTagService):
        self.tag_service = tag_service

    async def apply(
        self,
        file_ids: Iterable[str],
        tags: list[AssetTag],
        policy: BulkApplyPolicy | str,
    ) -> dict[str, list[AssetTag]]:
        """Write ``tags`` to every file in ``file_ids``.

        With ``replace`` each file ends up with exactly ``tags``. With
        ``merge`` the supplied tags are added to what each file already has,
        overwriting the value of any tag with the same resolved key.

        The whole batch goes to storage as one request. It is not retried
        and partial failures are not rolled back here.

        Raises:
            ValidationError: If there are no files, no tags, an unknown
                policy or an invalid tag value.
            RemoteError: If the store cannot be written.
        """
        file_ids = [f for f in dict.fromkeys(file_ids) if f]
        if not file_ids:
            raise ValidationError("Select at least one file")
        if not tags:
            raise ValidationError("Add at least one tag")

        try:
            policy = BulkApplyPolicy(policy)
        except ValueError:
            raise ValidationError(f"Unknown bulk apply policy: {policy}") from None

        validate_tag_set(tags)

        result = await self.tag_service.persist_tags_bulk(file_ids, tags, policy)

        logger.info(
            "bulk_tags_applied",
            files=len(file_ids),
            tags=len(tags),
            policy=policy.value,
        )

        return result
