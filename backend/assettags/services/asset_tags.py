"""Tag persistence: reading and writing the tag sets attached to files."""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from assettags.core.exceptions import ValidationError
from assettags.core.logging import get_logger
from assettags.db.models import AssetTagKey, FileTag
from assettags.services.errors import storage_errors
from assettags.services.frameworks import FrameworkRegistry
from assettags.tagging.bulk import apply_policy
from assettags.tagging.enums import BulkApplyPolicy
from assettags.tagging.keys import CanonicalKey, random_key_color
from assettags.tagging.models import AssetTag, TagFramework
from assettags.tagging.validation import validate_tag_set
from assettags.tagging.values import coerce_value, value_to_wire

logger = get_logger(__name__)


class AssetTagService:
    """Service for loading and upserting file tags."""

    def __init__(self, db: AsyncSession, registry: FrameworkRegistry | None = None):
        """Initialize the service.

        Args:
            db: The database session.
            registry: Registry used to resolve framework ids; one bound to
                ``db`` is created when omitted.
        """
        self.db = db
        self.registry = registry or FrameworkRegistry(db)

    @property
    def org_id(self) -> str:
        return self.registry.org_id

    # =========================================================================
    # Reading
    # =========================================================================

    async def get_tags(self, file_id: str) -> list[AssetTag]:
        """Load a file's tags in their saved order.

        Framework-derived tags get the framework's current definition and
        their values coerced to its template types.
        """
        with storage_errors("load tags"):
            rows = await self._get_rows(file_id)

        frameworks = await self.registry.fetch_frameworks(
            row.framework_id for row in rows if row.framework_id
        )
        return [self._to_domain(row, frameworks.get(row.framework_id or "")) for row in rows]

    async def get_tags_for_files(self, file_ids: Iterable[str]) -> dict[str, list[AssetTag]]:
        """Load tags for several files, keyed by file id."""
        return {file_id: await self.get_tags(file_id) for file_id in dict.fromkeys(file_ids)}

    async def resolve_frameworks(self, framework_ids: Iterable[str | None]) -> dict[str, TagFramework]:
        """Resolve framework ids referenced by incoming tags.

        Raises:
            ValidationError: If an id does not name a framework.
        """
        wanted = {i for i in framework_ids if i}
        frameworks = await self.registry.fetch_frameworks(wanted)
        missing = sorted(wanted - frameworks.keys())
        if missing:
            raise ValidationError(f"Unknown framework: {missing[0]}")
        return frameworks

    # =========================================================================
    # Writing
    # =========================================================================

    async def persist_tags(self, file_id: str, tags: list[AssetTag]) -> list[AssetTag]:
        """Replace a file's tag set with ``tags``.

        Stored tags whose uuid is not in ``tags`` are deleted, matching ones
        are updated and the rest are inserted with a new uuid.

        Raises:
            ValidationError: If any tag fails validation. Nothing is written.
            RemoteError: If the store cannot be written.
        """
        validate_tag_set(tags)

        with storage_errors("save tags"):
            written = await self._write_tags(file_id, tags, {})

        logger.info("tags_persisted", file_id=file_id, count=len(written))
        return await self.get_tags(file_id)

    async def persist_tags_bulk(
        self,
        file_ids: Iterable[str],
        tags: list[AssetTag],
        policy: BulkApplyPolicy,
    ) -> dict[str, list[AssetTag]]:
        """Apply one tag set to many files.

        Every file is written in the caller's transaction; a failure on any
        file leaves the transaction to be rolled back by the caller. Each
        file's resulting set is validated before anything is written, so
        a value that breaks one file's template blocks the whole batch.

        Returns:
            The resulting tag set per file id.

        Raises:
            ValidationError: If any resulting tag fails validation.
            RemoteError: If the store cannot be written.
        """
        validate_tag_set(tags)
        file_ids = list(dict.fromkeys(file_ids))

        results: dict[str, list[AssetTag]] = {}
        for file_id in file_ids:
            merged = apply_policy(await self.get_tags(file_id), tags, policy)
            validate_tag_set(merged)
            results[file_id] = merged

        key_cache: dict[tuple[str, str | None], AssetTagKey] = {}
        for file_id, merged in results.items():
            with storage_errors("save tags"):
                await self._write_tags(file_id, merged, key_cache)

        logger.info(
            "tags_persisted",
            files=len(file_ids),
            count=len(tags),
            policy=BulkApplyPolicy(policy).value,
        )
        return await self.get_tags_for_files(file_ids)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _get_rows(self, file_id: str) -> list[FileTag]:
        result = await self.db.execute(
            select(FileTag)
            .where(FileTag.file_id == file_id)
            .order_by(FileTag.position, FileTag.created_at)
        )
        return list(result.scalars().unique().all())

    async def _write_tags(
        self,
        file_id: str,
        tags: list[AssetTag],
        key_cache: dict[tuple[str, str | None], AssetTagKey],
    ) -> list[FileTag]:
        existing = {row.uuid: row for row in await self._get_rows(file_id)}
        kept = {tag.uuid for tag in tags if tag.uuid in existing}

        stale = [u for u in existing if u not in kept]
        if stale:
            await self.db.execute(delete(FileTag).where(FileTag.uuid.in_(stale)))

        written: list[FileTag] = []
        for position, tag in enumerate(tags):
            key_record = await self._upsert_key(tag, key_cache)
            framework_id = tag.framework.id if tag.framework is not None else None
            value = value_to_wire(tag.value)

            row = existing.get(tag.uuid)
            if row is None:
                row = FileTag(
                    uuid=str(uuid.uuid4()),
                    file_id=file_id,
                    position=position,
                    key=key_record,
                    value=value,
                    framework_id=framework_id,
                )
                self.db.add(row)
            else:
                row.position = position
                row.key = key_record
                row.value = value
                row.framework_id = framework_id
            written.append(row)

        await self.db.flush()
        return written

    async def _upsert_key(
        self,
        tag: AssetTag,
        key_cache: dict[tuple[str, str | None], AssetTagKey],
    ) -> AssetTagKey:
        """Find or create the stored key a tag points at.

        A canonical key is used as-is when its record still carries the same
        title. Otherwise a key with the tag's title is looked up, preferring
        one owned by the tag's framework, then a free-standing one.
        """
        title = tag.resolved_key
        framework_id = tag.framework.id if tag.framework is not None else None

        if isinstance(tag.key, CanonicalKey):
            record = await self.db.get(AssetTagKey, tag.key.id)
            if (
                record is not None
                and record.org_id == self.org_id
                and not record.is_deleted
                and record.title == title
            ):
                return record

        cache_key = (title, framework_id)
        if cache_key in key_cache:
            return key_cache[cache_key]

        result = await self.db.execute(
            select(AssetTagKey).where(
                AssetTagKey.org_id == self.org_id,
                AssetTagKey.title == title,
                AssetTagKey.is_deleted.is_(False),
            )
        )
        candidates = list(result.scalars().all())

        record = None
        if framework_id is not None:
            record = next((k for k in candidates if k.framework_id == framework_id), None)
        if record is None:
            record = next((k for k in candidates if k.framework_id is None), None)
        if record is None:
            hex_color = tag.key.hex if isinstance(tag.key, CanonicalKey) else None
            record = AssetTagKey(
                org_id=self.org_id,
                title=title,
                hex=hex_color or random_key_color(),
                framework_id=None,
            )
            self.db.add(record)
            await self.db.flush()
            logger.debug("tag_key_created", key_id=record.id, title=title)

        key_cache[cache_key] = record
        return record

    def _to_domain(self, row: FileTag, framework: TagFramework | None) -> AssetTag:
        key = CanonicalKey(id=row.key.id, title=row.key.title, hex=row.key.hex)
        value = row.value
        if framework is not None:
            template = framework.find_template(key)
            if template is not None:
                value = coerce_value(template.value_type, value)
        return AssetTag(uuid=row.uuid, key=key, value=value, framework=framework)
