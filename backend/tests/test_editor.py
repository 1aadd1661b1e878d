"""Tests for TagEditSession."""

from __future__ import annotations

import asyncio

import pytest

from assettags.core.exceptions import NotFoundError, ValidationError
from assettags.services.asset_tags import AssetTagService
from assettags.services.editor import TagEditSession
from assettags.services.frameworks import FrameworkRegistry
from assettags.tagging.enums import TagValueType
from assettags.tagging.keys import PlainKey
from assettags.tagging.models import TagFramework, TagTemplate


def make_framework(framework_id: str, *keys: str) -> TagFramework:
    return TagFramework(
        id=framework_id,
        name=framework_id.title(),
        templates=[TagTemplate(key=PlainKey(k)) for k in keys],
    )


class GatedRegistry:
    """Registry stand-in whose responses are released by the test."""

    def __init__(self, frameworks: dict[str, TagFramework]):
        self.frameworks = frameworks
        self.gates = {key: asyncio.Event() for key in frameworks}

    async def fetch_framework(self, framework_id: str) -> TagFramework:
        await self.gates[framework_id].wait()
        return self.frameworks[framework_id]


@pytest.fixture
def registry(db_session) -> FrameworkRegistry:
    return FrameworkRegistry(db_session)


@pytest.fixture
def session(db_session, registry) -> TagEditSession:
    return TagEditSession("file-1", registry, AssetTagService(db_session, registry))


@pytest.fixture
async def topics_framework(registry) -> TagFramework:
    return await registry.save_framework(
        "Topics",
        [
            TagTemplate(
                key=PlainKey("Topics"),
                value_type=TagValueType.MULTISELECT,
                options=["Cells", "DNA"],
            ),
            TagTemplate(key=PlainKey("Level"), value_type=TagValueType.NUMBER),
        ],
    )


class TestEditing:
    """Tests for in-memory edits."""

    async def test_add_set_and_save(self, session):
        tag = session.add_tag("Note")
        session.set_value(tag.uuid, "hello")
        assert session.dirty

        saved = await session.save()

        assert [(t.resolved_key, t.value) for t in saved] == [("Note", "hello")]
        assert not session.dirty

    async def test_load_returns_saved_tags(self, session):
        session.add_tag("Note", "hello")
        await session.save()

        session.tags = []
        loaded = await session.load()

        assert [t.resolved_key for t in loaded] == ["Note"]

    async def test_remove_tag(self, session):
        tag = session.add_tag("Note", "x")
        session.remove_tag(tag.uuid)
        assert session.tags == []

    async def test_unknown_tag_raises(self, session):
        with pytest.raises(NotFoundError):
            session.set_value("missing", "x")

    async def test_rename_free_form_tag(self, session):
        tag = session.add_tag("Nte", "x")
        session.rename_key(tag.uuid, "Note")
        assert tag.resolved_key == "Note"

    async def test_framework_tags_cannot_be_renamed(self, session, topics_framework):
        added = await session.apply_framework(topics_framework.id)
        with pytest.raises(ValidationError):
            session.rename_key(added[0].uuid, "Other")

    async def test_set_value_coerces_to_template_type(self, session, topics_framework):
        added = await session.apply_framework(topics_framework.id)
        level = next(t for t in added if t.resolved_key == "Level")
        session.set_value(level.uuid, "3")
        assert level.value == 3

    async def test_add_option_is_scoped_to_value(self, session, topics_framework):
        added = await session.apply_framework(topics_framework.id)
        topics = added[0]

        session.add_option(topics.uuid, "Genes")

        assert topics.value == ["Genes"]
        assert topics.template.options == ["Cells", "DNA"]

    async def test_add_option_requires_multiselect(self, session):
        tag = session.add_tag("Note", "x")
        with pytest.raises(ValidationError):
            session.add_option(tag.uuid, "Genes")

    async def test_save_rejects_empty_values(self, session):
        session.add_tag("Note")
        with pytest.raises(ValidationError) as exc_info:
            await session.save()
        assert exc_info.value.key == "Note"
        assert len(session.tags) == 1


class TestApplyFramework:
    """Tests for framework selection."""

    async def test_apply_twice_adds_nothing_new(self, session, topics_framework):
        first = await session.apply_framework(topics_framework.id)
        second = await session.apply_framework(topics_framework.id)

        assert len(first) == 2
        assert second == []
        assert len(session.tags) == 2

    async def test_stale_response_is_discarded(self, db_session):
        gated = GatedRegistry(
            {
                "first": make_framework("first", "A"),
                "second": make_framework("second", "B"),
            }
        )
        session = TagEditSession("file-1", gated, AssetTagService(db_session))

        first_call = asyncio.create_task(session.apply_framework("first"))
        await asyncio.sleep(0)
        second_call = asyncio.create_task(session.apply_framework("second"))
        await asyncio.sleep(0)

        # The newer request resolves first, the older one last
        gated.gates["second"].set()
        assert [t.resolved_key for t in await second_call] == ["B"]
        gated.gates["first"].set()
        assert await first_call == []

        assert [t.resolved_key for t in session.tags] == ["B"]
        assert session.framework.id == "second"

    async def test_stale_failure_is_discarded(self, session, topics_framework):
        gated = GatedRegistry({"good": topics_framework})
        failing_session = TagEditSession("file-1", gated, session.tag_service)

        async def failing_fetch(framework_id):
            if framework_id == "missing":
                await asyncio.sleep(0)
                await asyncio.sleep(0)
                raise NotFoundError("Framework", framework_id)
            return await GatedRegistry.fetch_framework(gated, framework_id)

        gated.fetch_framework = failing_fetch

        stale = asyncio.create_task(failing_session.apply_framework("missing"))
        await asyncio.sleep(0)
        current = asyncio.create_task(failing_session.apply_framework("good"))

        assert await stale == []
        gated.gates["good"].set()
        assert len(await current) == 2

    async def test_current_failure_propagates(self, session):
        with pytest.raises(NotFoundError):
            await session.apply_framework("missing")
