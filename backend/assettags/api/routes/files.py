"""File tag API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from assettags.api.errors import http_error
from assettags.core.config import settings
from assettags.core.exceptions import TaggingError
from assettags.core.logging import get_logger
from assettags.db import get_db
from assettags.schemas.tagging import (
    AssetTagSchema,
    RenderResponse,
    SyncRequest,
    SyncResponse,
    TagChipSchema,
    TagDetailSchema,
    TagSetRequest,
    TagSetResponse,
)
from assettags.services.asset_tags import AssetTagService
from assettags.tagging.models import AssetTag
from assettags.tagging.render import render_tag_chips, render_tag_details
from assettags.tagging.sync import synchronize

logger = get_logger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


async def tags_from_request(
    service: AssetTagService,
    items: list[AssetTagSchema],
) -> list[AssetTag]:
    """Convert wire tags to domain tags, resolving their frameworks."""
    frameworks = await service.resolve_frameworks(t.framework_id for t in items)
    return [
        t.to_domain(frameworks.get(t.framework_id) if t.framework_id else None)
        for t in items
    ]


@router.get("/{file_id}/tags", response_model=TagSetResponse)
async def get_file_tags(
    file_id: str,
    db: AsyncSession = Depends(get_db),
) -> TagSetResponse:
    """Get a file's tags in saved order."""
    service = AssetTagService(db)
    try:
        tags = await service.get_tags(file_id)
    except TaggingError as e:
        raise http_error(e) from e

    return TagSetResponse(
        file_id=file_id,
        tags=[AssetTagSchema.from_domain(t) for t in tags],
    )


@router.put("/{file_id}/tags", response_model=TagSetResponse)
async def save_file_tags(
    file_id: str,
    request: TagSetRequest,
    db: AsyncSession = Depends(get_db),
) -> TagSetResponse:
    """Replace a file's tag set.

    Tags whose uuid is not sent are deleted. Every tag must have a key and a
    value; an invalid tag rejects the whole request.
    """
    service = AssetTagService(db)
    try:
        tags = await tags_from_request(service, request.tags)
        saved = await service.persist_tags(file_id, tags)
    except TaggingError as e:
        raise http_error(e) from e

    return TagSetResponse(
        file_id=file_id,
        tags=[AssetTagSchema.from_domain(t) for t in saved],
    )


@router.post("/{file_id}/tags/sync", response_model=SyncResponse)
async def sync_file_tags(
    file_id: str,
    request: SyncRequest,
    db: AsyncSession = Depends(get_db),
) -> SyncResponse:
    """Create tags for the framework templates a file is missing.

    The new tags are returned for editing and are not saved.
    """
    service = AssetTagService(db)
    try:
        framework = await service.registry.fetch_framework(request.framework_id)
        if request.tags is not None:
            current = await tags_from_request(service, request.tags)
        else:
            current = await service.get_tags(file_id)
    except TaggingError as e:
        raise http_error(e) from e

    added = synchronize(current, framework)

    logger.debug(
        "file_tags_synchronized",
        file_id=file_id,
        framework_id=framework.id,
        added=len(added),
    )

    return SyncResponse(
        file_id=file_id,
        framework_id=framework.id,
        added=[AssetTagSchema.from_domain(t) for t in added],
    )


@router.get("/{file_id}/tags/summary", response_model=RenderResponse)
async def get_file_tag_summary(
    file_id: str,
    max_chips: int | None = Query(None, ge=0, description="Chip limit before overflow"),
    spread_array: bool = Query(False, description="One chip per value"),
    db: AsyncSession = Depends(get_db),
) -> RenderResponse:
    """Render a file's tags as compact chips plus full detail rows."""
    service = AssetTagService(db)
    try:
        tags = await service.get_tags(file_id)
    except TaggingError as e:
        raise http_error(e) from e

    limit = settings.summary_max_chips if max_chips is None else max_chips
    chips = render_tag_chips(tags, max_chips=limit, spread_array=spread_array)

    return RenderResponse(
        chips=[TagChipSchema.from_domain(c) for c in chips],
        details=[TagDetailSchema.from_domain(d) for d in render_tag_details(tags)],
    )
