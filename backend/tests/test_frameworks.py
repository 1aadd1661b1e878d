"""Tests for FrameworkRegistry."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from assettags.core.exceptions import NotFoundError, RemoteError, ValidationError
from assettags.db.models import AssetTagKey
from assettags.services.frameworks import FrameworkRegistry
from assettags.tagging.enums import TagValueType
from assettags.tagging.keys import CanonicalKey, PlainKey
from assettags.tagging.models import TagTemplate


def course_templates() -> list[TagTemplate]:
    return [
        TagTemplate(
            key=PlainKey("Subject"),
            value_type=TagValueType.DROPDOWN,
            options=["Chem", "Bio", ""],
        ),
        TagTemplate(key=PlainKey("License"), value_type=TagValueType.TEXT, hex="#112233"),
    ]


@pytest.fixture
def registry(db_session) -> FrameworkRegistry:
    return FrameworkRegistry(db_session, org_id="org-1")


# =============================================================================
# Saving
# =============================================================================


class TestSaveFramework:
    """Tests for creating and updating frameworks."""

    async def test_create_returns_canonical_keys(self, registry):
        framework = await registry.save_framework("Course", course_templates())

        assert framework.id
        assert framework.name == "Course"
        assert [t.resolved_key for t in framework.templates] == ["Subject", "License"]
        assert all(isinstance(t.key, CanonicalKey) for t in framework.templates)

    async def test_options_are_cleaned_and_sorted(self, registry):
        framework = await registry.save_framework("Course", course_templates())
        assert framework.templates[0].options == ["Bio", "Chem"]

    async def test_template_color_kept_or_generated(self, registry):
        framework = await registry.save_framework("Course", course_templates())
        subject, license_ = framework.templates
        assert license_.hex == "#112233"
        assert subject.hex and subject.hex.startswith("#")

    async def test_update_reuses_keys_by_title(self, registry, db_session):
        created = await registry.save_framework("Course", course_templates())
        subject_key = created.templates[0].key

        templates = [
            TagTemplate(key=PlainKey("Subject"), value_type=TagValueType.MULTISELECT, options=["Bio"]),
            TagTemplate(key=PlainKey("Term"), value_type=TagValueType.TEXT),
        ]
        updated = await registry.save_framework(
            "Course v2", templates, framework_id=created.id
        )

        assert updated.name == "Course v2"
        assert updated.templates[0].key.id == subject_key.id
        assert updated.templates[0].value_type == TagValueType.MULTISELECT
        assert [t.resolved_key for t in updated.templates] == ["Subject", "Term"]

        result = await db_session.execute(
            select(AssetTagKey).where(AssetTagKey.title == "Subject")
        )
        assert len(result.scalars().all()) == 1

    async def test_update_missing_framework(self, registry):
        with pytest.raises(NotFoundError):
            await registry.save_framework("X", [], framework_id="missing")

    async def test_name_required(self, registry):
        with pytest.raises(ValidationError):
            await registry.save_framework("  ", course_templates())

    async def test_duplicate_template_keys_rejected(self, registry):
        templates = [TagTemplate(key=PlainKey("A")), TagTemplate(key=PlainKey("A"))]
        with pytest.raises(ValidationError) as exc_info:
            await registry.save_framework("Dupes", templates)
        assert exc_info.value.key == "A"

    async def test_dropdown_needs_options(self, registry):
        templates = [TagTemplate(key=PlainKey("Subject"), value_type=TagValueType.DROPDOWN)]
        with pytest.raises(ValidationError):
            await registry.save_framework("Course", templates)

    async def test_default_must_conform(self, registry):
        templates = [
            TagTemplate(
                key=PlainKey("Subject"),
                value_type=TagValueType.DROPDOWN,
                options=["Bio"],
                default_value="Physics",
            )
        ]
        with pytest.raises(ValidationError):
            await registry.save_framework("Course", templates)

    async def test_date_default_round_trips(self, registry):
        templates = [
            TagTemplate(
                key=PlainKey("Published"),
                value_type=TagValueType.DATE,
                default_value="2024-05-01T00:00:00+00:00",
            )
        ]
        framework = await registry.save_framework("Dated", templates)
        fetched = await registry.fetch_framework(framework.id)
        assert fetched.templates[0].default_value.year == 2024


# =============================================================================
# Fetching
# =============================================================================


class TestFetchFramework:
    """Tests for framework retrieval."""

    async def test_fetch_by_id(self, registry):
        created = await registry.save_framework("Course", course_templates())
        fetched = await registry.fetch_framework(created.id)
        assert fetched.name == "Course"
        assert fetched.find_template("License") is not None

    async def test_fetch_missing_raises(self, registry):
        with pytest.raises(NotFoundError) as exc_info:
            await registry.fetch_framework("missing")
        assert exc_info.value.identifier == "missing"

    async def test_other_org_is_invisible(self, registry, db_session):
        created = await registry.save_framework("Course", course_templates())
        other = FrameworkRegistry(db_session, org_id="org-2")
        with pytest.raises(NotFoundError):
            await other.fetch_framework(created.id)

    async def test_storage_failure_becomes_remote_error(self, registry):
        registry.db = AsyncMock()
        registry.db.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))
        with pytest.raises(RemoteError) as exc_info:
            await registry.fetch_framework("any")
        assert isinstance(exc_info.value.__cause__, OperationalError)

    async def test_fetch_frameworks_skips_unknown(self, registry):
        created = await registry.save_framework("Course", course_templates())
        found = await registry.fetch_frameworks([created.id, "missing", None])
        assert list(found) == [created.id]


class TestFrameworkList:
    """Tests for listing frameworks."""

    async def test_sorted_by_name_with_total(self, registry):
        for name in ("Zoology", "Art", "Math"):
            await registry.save_framework(name, [])

        frameworks, total = await registry.fetch_framework_list()

        assert total == 3
        assert [f.name for f in frameworks] == ["Art", "Math", "Zoology"]

    async def test_query_filters(self, registry):
        await registry.save_framework("Biology", [], description="Life science")
        await registry.save_framework("Chemistry", [])

        frameworks, total = await registry.fetch_framework_list(query="life")

        assert total == 1
        assert frameworks[0].name == "Biology"

    async def test_pagination(self, registry):
        for i in range(5):
            await registry.save_framework(f"Framework {i}", [])

        page_two, total = await registry.fetch_framework_list(page=2, limit=2)

        assert total == 5
        assert [f.name for f in page_two] == ["Framework 2", "Framework 3"]


class TestDefaultFramework:
    """Tests for the organization default framework."""

    async def test_no_default_initially(self, registry):
        assert await registry.fetch_default_framework() is None

    async def test_set_and_fetch_default(self, registry):
        created = await registry.save_framework("Course", course_templates())
        await registry.set_default_framework(created.id)

        default = await registry.fetch_default_framework()

        assert default is not None
        assert default.id == created.id
        assert default.is_default

        frameworks, _ = await registry.fetch_framework_list()
        assert frameworks[0].is_default

    async def test_clear_default(self, registry):
        created = await registry.save_framework("Course", course_templates())
        await registry.set_default_framework(created.id)
        await registry.set_default_framework(None)
        assert await registry.fetch_default_framework() is None

    async def test_unknown_default_rejected(self, registry):
        with pytest.raises(NotFoundError):
            await registry.set_default_framework("missing")

    async def test_default_is_kept_per_organization(self, registry, db_session):
        created = await registry.save_framework("Course", course_templates())
        await registry.set_default_framework(created.id)

        other = FrameworkRegistry(db_session, org_id="org-2")
        assert await other.fetch_default_framework() is None

        theirs = await other.save_framework("Unit", course_templates())
        await other.set_default_framework(theirs.id)

        assert (await registry.fetch_default_framework()).id == created.id
        assert (await other.fetch_default_framework()).id == theirs.id
