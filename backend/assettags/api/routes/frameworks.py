"""Framework API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from assettags.api.errors import http_error
from assettags.core.config import settings
from assettags.core.exceptions import TaggingError
from assettags.core.logging import get_logger
from assettags.db import get_db
from assettags.schemas.tagging import (
    DefaultFrameworkRequest,
    FrameworkListResponse,
    FrameworkSaveRequest,
    TagFrameworkSchema,
)
from assettags.services.frameworks import FrameworkRegistry

logger = get_logger(__name__)

router = APIRouter(prefix="/frameworks", tags=["frameworks"])


@router.get("", response_model=FrameworkListResponse)
async def list_frameworks(
    query: str | None = Query(None, description="Search by name or description"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int | None = Query(None, ge=1, le=100, description="Frameworks per page"),
    db: AsyncSession = Depends(get_db),
) -> FrameworkListResponse:
    """List frameworks sorted by name."""
    registry = FrameworkRegistry(db)
    page_size = page_size or settings.frameworks_page_size
    try:
        frameworks, total = await registry.fetch_framework_list(
            query=query, page=page, limit=page_size
        )
    except TaggingError as e:
        raise http_error(e) from e

    return FrameworkListResponse(
        items=[TagFrameworkSchema.from_domain(f) for f in frameworks],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("", response_model=TagFrameworkSchema, status_code=201)
async def create_framework(
    request: FrameworkSaveRequest,
    db: AsyncSession = Depends(get_db),
) -> TagFrameworkSchema:
    """Create a framework."""
    registry = FrameworkRegistry(db)
    try:
        framework = await registry.save_framework(
            name=request.name,
            templates=[t.to_domain() for t in request.templates],
            description=request.description,
            enabled=request.enabled,
        )
    except TaggingError as e:
        raise http_error(e) from e

    return TagFrameworkSchema.from_domain(framework)


@router.get("/default", response_model=TagFrameworkSchema | None)
async def get_default_framework(
    db: AsyncSession = Depends(get_db),
) -> TagFrameworkSchema | None:
    """Get the organization's default framework, or null."""
    registry = FrameworkRegistry(db)
    try:
        framework = await registry.fetch_default_framework()
    except TaggingError as e:
        raise http_error(e) from e

    return TagFrameworkSchema.from_domain(framework) if framework else None


@router.put("/default", response_model=TagFrameworkSchema | None)
async def set_default_framework(
    request: DefaultFrameworkRequest,
    db: AsyncSession = Depends(get_db),
) -> TagFrameworkSchema | None:
    """Set the default framework. A null id clears it."""
    registry = FrameworkRegistry(db)
    try:
        await registry.set_default_framework(request.framework_id)
        framework = await registry.fetch_default_framework()
    except TaggingError as e:
        raise http_error(e) from e

    return TagFrameworkSchema.from_domain(framework) if framework else None


@router.get("/{framework_id}", response_model=TagFrameworkSchema)
async def get_framework(
    framework_id: str,
    db: AsyncSession = Depends(get_db),
) -> TagFrameworkSchema:
    """Get a framework with its templates."""
    registry = FrameworkRegistry(db)
    try:
        framework = await registry.fetch_framework(framework_id)
    except TaggingError as e:
        raise http_error(e) from e

    return TagFrameworkSchema.from_domain(framework)


@router.put("/{framework_id}", response_model=TagFrameworkSchema)
async def update_framework(
    framework_id: str,
    request: FrameworkSaveRequest,
    db: AsyncSession = Depends(get_db),
) -> TagFrameworkSchema:
    """Replace a framework's attributes and templates."""
    registry = FrameworkRegistry(db)
    try:
        framework = await registry.save_framework(
            name=request.name,
            templates=[t.to_domain() for t in request.templates],
            description=request.description,
            enabled=request.enabled,
            framework_id=framework_id,
        )
    except TaggingError as e:
        raise http_error(e) from e

    return TagFrameworkSchema.from_domain(framework)
