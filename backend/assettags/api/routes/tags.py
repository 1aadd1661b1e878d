"""Tag API endpoints that are not tied to a single file."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from assettags.api.errors import http_error
from assettags.api.routes.files import tags_from_request
from assettags.core.exceptions import TaggingError
from assettags.core.logging import get_logger
from assettags.db import get_db
from assettags.schemas.tagging import (
    AssetTagSchema,
    BulkApplyRequest,
    BulkApplyResponse,
    RenderRequest,
    RenderResponse,
    TagChipSchema,
    TagDetailSchema,
)
from assettags.services.asset_tags import AssetTagService
from assettags.services.bulk import BulkApplyService
from assettags.tagging.render import render_tag_chips, render_tag_details

logger = get_logger(__name__)

router = APIRouter(prefix="/tags", tags=["tags"])


@router.post("/bulk", response_model=BulkApplyResponse)
async def bulk_apply_tags(
    request: BulkApplyRequest,
    db: AsyncSession = Depends(get_db),
) -> BulkApplyResponse:
    """Apply one tag set to many files.

    ``replace`` gives every file exactly the supplied tags. ``merge`` adds
    them to each file, overwriting the value of tags with the same key.
    """
    service = AssetTagService(db)
    try:
        tags = await tags_from_request(service, request.tags)
        result = await BulkApplyService(service).apply(request.file_ids, tags, request.policy)
    except TaggingError as e:
        raise http_error(e) from e

    return BulkApplyResponse(
        policy=request.policy,
        files={
            file_id: [AssetTagSchema.from_domain(t) for t in file_tags]
            for file_id, file_tags in result.items()
        },
    )


@router.post("/render", response_model=RenderResponse)
async def render_tags(
    request: RenderRequest,
    db: AsyncSession = Depends(get_db),
) -> RenderResponse:
    """Render an arbitrary tag set as chips and detail rows."""
    service = AssetTagService(db)
    try:
        tags = await tags_from_request(service, request.tags)
    except TaggingError as e:
        raise http_error(e) from e

    chips = render_tag_chips(
        tags,
        max_chips=request.max_chips,
        spread_array=request.spread_array,
        show_no_tags_message=request.show_no_tags_message,
    )

    return RenderResponse(
        chips=[TagChipSchema.from_domain(c) for c in chips],
        details=[TagDetailSchema.from_domain(d) for d in render_tag_details(tags)],
    )
