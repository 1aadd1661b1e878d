"""Framework registry: retrieval and maintenance of tag frameworks."""

from __future__ import annotations

import json
from collections.abc import Iterable

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from assettags.core.config import settings
from assettags.core.exceptions import NotFoundError, ValidationError
from assettags.core.logging import get_logger
from assettags.db.models import AppSetting, AssetTagFramework, AssetTagKey, AssetTagTemplate
from assettags.services.errors import storage_errors
from assettags.tagging.keys import CanonicalKey, random_key_color
from assettags.tagging.models import TagFramework, TagTemplate
from assettags.tagging.values import (
    OPTION_VALUE_TYPES,
    clean_options,
    coerce_value,
    coerce_value_type,
    conforms,
    sort_options,
    value_to_wire,
)

logger = get_logger(__name__)

DEFAULT_FRAMEWORK_SETTING = "default_framework_id"


class FrameworkRegistry:
    """Fetches and saves tag frameworks for one organization.

    Frameworks come back as domain objects whose template keys are
    :class:`CanonicalKey` references: callers match on the resolved title
    and can still show the stored key's color.
    """

    def __init__(self, db: AsyncSession, org_id: str | None = None):
        """Initialize the registry.

        Args:
            db: The database session.
            org_id: Owning organization; defaults to the configured one.
        """
        self.db = db
        self.org_id = org_id or settings.org_id

    # =========================================================================
    # Retrieval
    # =========================================================================

    async def fetch_framework(self, framework_id: str) -> TagFramework:
        """Fetch a framework by id.

        Raises:
            NotFoundError: If the organization has no such framework.
            RemoteError: If the store cannot be read.
        """
        with storage_errors("fetch framework"):
            record = await self._get_record(framework_id)
            default_id = await self._get_default_id()

        if record is None:
            raise NotFoundError("Framework", framework_id)

        return self._to_domain(record, default_id)

    async def fetch_frameworks(self, framework_ids: Iterable[str]) -> dict[str, TagFramework]:
        """Fetch several frameworks at once, keyed by id.

        Unknown ids are left out of the result.
        """
        ids = {i for i in framework_ids if i}
        if not ids:
            return {}

        with storage_errors("fetch frameworks"):
            result = await self.db.execute(
                self._base_query().where(
                    AssetTagFramework.id.in_(list(ids)),
                    AssetTagFramework.org_id == self.org_id,
                )
            )
            records = result.scalars().unique().all()
            default_id = await self._get_default_id()

        return {r.id: self._to_domain(r, default_id) for r in records}

    async def fetch_framework_list(
        self,
        query: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> tuple[list[TagFramework], int]:
        """List frameworks by name, optionally filtered by a search string.

        Args:
            query: Case-insensitive match against name and description.
            page: 1-based page number.
            limit: Page size; defaults to the configured page size.

        Returns:
            The page of frameworks and the total number matching.
        """
        limit = limit or settings.frameworks_page_size
        offset = (max(page, 1) - 1) * limit

        conditions = [AssetTagFramework.org_id == self.org_id]
        if query and query.strip():
            pattern = f"%{query.strip().lower()}%"
            conditions.append(
                or_(
                    func.lower(AssetTagFramework.name).like(pattern),
                    func.lower(AssetTagFramework.description).like(pattern),
                )
            )

        with storage_errors("list frameworks"):
            result = await self.db.execute(
                self._base_query()
                .where(*conditions)
                .order_by(AssetTagFramework.name)
                .offset(offset)
                .limit(limit)
            )
            records = result.scalars().unique().all()

            count_result = await self.db.execute(
                select(func.count(AssetTagFramework.id)).where(*conditions)
            )
            total = count_result.scalar() or 0
            default_id = await self._get_default_id()

        return [self._to_domain(r, default_id) for r in records], total

    async def fetch_default_framework(self) -> TagFramework | None:
        """Fetch the organization's default framework, if one is set."""
        with storage_errors("fetch default framework"):
            default_id = await self._get_default_id()
            if not default_id:
                return None
            record = await self._get_record(default_id)

        if record is None:
            return None
        return self._to_domain(record, default_id)

    # =========================================================================
    # Maintenance
    # =========================================================================

    async def save_framework(
        self,
        name: str,
        templates: list[TagTemplate],
        description: str = "",
        enabled: bool = True,
        framework_id: str | None = None,
    ) -> TagFramework:
        """Create a framework, or update it when ``framework_id`` is given."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Framework name is required")

        if framework_id is None:
            return await self.create_framework(name, templates, description, enabled)
        return await self.update_framework(framework_id, name, templates, description, enabled)

    async def create_framework(
        self,
        name: str,
        templates: list[TagTemplate],
        description: str = "",
        enabled: bool = True,
    ) -> TagFramework:
        """Create a framework and its templates."""
        self._check_templates(templates)

        with storage_errors("create framework"):
            record = AssetTagFramework(
                org_id=self.org_id,
                name=name,
                description=description or "",
                enabled=enabled,
                templates=[],
            )
            self.db.add(record)
            await self.db.flush()

            await self._replace_templates(record, templates)
            await self.db.flush()
            default_id = await self._get_default_id()

        logger.info(
            "framework_saved",
            framework_id=record.id,
            created=True,
            name=name,
            templates=len(templates),
        )

        return self._to_domain(record, default_id)

    async def update_framework(
        self,
        framework_id: str,
        name: str,
        templates: list[TagTemplate],
        description: str = "",
        enabled: bool = True,
    ) -> TagFramework:
        """Replace a framework's attributes and templates.

        Template keys given as plain strings reuse the framework's stored key
        with the same title, so tags already pointing at that key keep it.

        Raises:
            NotFoundError: If the framework does not exist.
        """
        self._check_templates(templates)

        with storage_errors("update framework"):
            record = await self._get_record(framework_id)
            if record is None:
                raise NotFoundError("Framework", framework_id)

            record.name = name
            record.description = description or ""
            record.enabled = enabled
            await self._replace_templates(record, templates)
            await self.db.flush()
            default_id = await self._get_default_id()

        logger.info(
            "framework_saved",
            framework_id=framework_id,
            created=False,
            name=name,
            templates=len(templates),
        )

        return self._to_domain(record, default_id)

    async def set_default_framework(self, framework_id: str | None) -> None:
        """Make a framework the organization default, or clear the default.

        Raises:
            NotFoundError: If the framework does not exist.
        """
        with storage_errors("set default framework"):
            if framework_id is not None:
                record = await self._get_record(framework_id)
                if record is None:
                    raise NotFoundError("Framework", framework_id)

            setting = await self.db.get(AppSetting, (self.org_id, DEFAULT_FRAMEWORK_SETTING))
            if setting is None:
                setting = AppSetting(
                    org_id=self.org_id, key=DEFAULT_FRAMEWORK_SETTING, value="null"
                )
                self.db.add(setting)
            setting.value = json.dumps(framework_id)
            await self.db.flush()

        logger.info("default_framework_set", framework_id=framework_id)

    # =========================================================================
    # Internals
    # =========================================================================

    def _base_query(self):
        return select(AssetTagFramework).options(
            selectinload(AssetTagFramework.templates)
        )

    async def _get_record(self, framework_id: str) -> AssetTagFramework | None:
        result = await self.db.execute(
            self._base_query().where(
                AssetTagFramework.id == framework_id,
                AssetTagFramework.org_id == self.org_id,
            )
        )
        return result.scalars().unique().one_or_none()

    async def _get_default_id(self) -> str | None:
        setting = await self.db.get(AppSetting, (self.org_id, DEFAULT_FRAMEWORK_SETTING))
        if setting is None:
            return None
        try:
            value = json.loads(setting.value)
        except json.JSONDecodeError:
            return None
        return value if isinstance(value, str) else None

    def _check_templates(self, templates: list[TagTemplate]) -> None:
        """Reject template lists that cannot be saved.

        Raises:
            ValidationError: Naming the offending template key.
        """
        seen: set[str] = set()
        for template in templates:
            key = template.resolved_key
            if not key:
                raise ValidationError("Template is missing a key")
            if key in seen:
                raise ValidationError(f"Template key '{key}' is used more than once", key=key)
            seen.add(key)

            value_type = coerce_value_type(template.value_type)
            options = clean_options(template.options)
            if value_type in OPTION_VALUE_TYPES and not options:
                raise ValidationError(
                    f"Template '{key}' needs at least one option", key=key
                )
            if template.default_value is not None:
                default = coerce_value(value_type, template.default_value)
                if not conforms(value_type, default, options):
                    raise ValidationError(
                        f"Template '{key}' has a default that is not a valid {value_type.value}",
                        key=key,
                    )

    async def _replace_templates(
        self,
        record: AssetTagFramework,
        templates: list[TagTemplate],
    ) -> None:
        result = await self.db.execute(
            select(AssetTagKey).where(
                AssetTagKey.org_id == self.org_id,
                AssetTagKey.framework_id == record.id,
                AssetTagKey.is_deleted.is_(False),
            )
        )
        keys = list(result.scalars().all())
        by_id = {k.id: k for k in keys}
        by_title = {k.title: k for k in keys}

        rows: list[AssetTagTemplate] = []
        for position, template in enumerate(templates):
            title = template.resolved_key
            key_record: AssetTagKey | None = None
            if isinstance(template.key, CanonicalKey):
                key_record = by_id.get(template.key.id)
            if key_record is None:
                key_record = by_title.get(title)
            if key_record is None:
                key_record = AssetTagKey(
                    org_id=self.org_id,
                    title=title,
                    hex=template.hex or random_key_color(),
                    framework_id=record.id,
                )
                self.db.add(key_record)
                by_title[title] = key_record
            else:
                # Renaming a template renames its stored key
                key_record.title = title
                if template.hex:
                    key_record.hex = template.hex

            value_type = coerce_value_type(template.value_type)
            options = sort_options(template.options) if value_type in OPTION_VALUE_TYPES else []
            default_value = (
                value_to_wire(coerce_value(value_type, template.default_value))
                if template.default_value is not None
                else None
            )
            rows.append(
                AssetTagTemplate(
                    key=key_record,
                    position=position,
                    value_type=value_type,
                    options=options,
                    default_value=default_value,
                )
            )

        record.templates = rows

    def _to_domain(self, record: AssetTagFramework, default_id: str | None) -> TagFramework:
        templates: list[TagTemplate] = []
        for row in record.templates:
            if row.key is None or row.key.is_deleted:
                continue
            value_type = coerce_value_type(row.value_type)
            options = clean_options(row.options) if value_type in OPTION_VALUE_TYPES else []
            templates.append(
                TagTemplate(
                    key=CanonicalKey(id=row.key.id, title=row.key.title, hex=row.key.hex),
                    value_type=value_type,
                    options=options,
                    default_value=(
                        coerce_value(value_type, row.default_value)
                        if row.default_value is not None
                        else None
                    ),
                    hex=row.key.hex,
                )
            )

        return TagFramework(
            id=record.id,
            name=record.name,
            templates=templates,
            description=record.description or "",
            enabled=record.enabled,
            is_default=record.id == default_id,
        )
