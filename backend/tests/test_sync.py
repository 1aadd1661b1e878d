"""Tests for framework synchronization."""

from __future__ import annotations

import itertools
from datetime import datetime, timezone

import pytest

from assettags.tagging.enums import TagValueType
from assettags.tagging.keys import CanonicalKey, PlainKey
from assettags.tagging.models import AssetTag, TagFramework, TagTemplate
from assettags.tagging.sync import synchronize

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


@pytest.fixture
def course_framework() -> TagFramework:
    """Framework with a dropdown and a text field."""
    return TagFramework(
        id="f1",
        name="Course",
        templates=[
            TagTemplate(
                key=CanonicalKey(id="k1", title="Subject"),
                value_type=TagValueType.DROPDOWN,
                options=["Bio", "Chem"],
            ),
            TagTemplate(
                key=CanonicalKey(id="k2", title="License"),
                value_type=TagValueType.TEXT,
            ),
        ],
    )


def counter_ids():
    counter = itertools.count(1)
    return lambda: f"new-{next(counter)}"


class TestSynchronize:
    """Tests for synchronize."""

    def test_adds_only_missing_templates(self, course_framework):
        existing = [AssetTag(uuid="t1", key=PlainKey("Subject"), value="Bio")]

        added = synchronize(existing, course_framework)

        assert len(added) == 1
        assert added[0].resolved_key == "License"
        assert added[0].value == ""
        assert added[0].framework is course_framework

    def test_new_tags_use_plain_resolved_key(self, course_framework):
        added = synchronize([], course_framework)
        assert [t.key for t in added] == [PlainKey("Subject"), PlainKey("License")]

    def test_empty_file_gets_every_template_in_order(self, course_framework):
        added = synchronize([], course_framework, id_factory=counter_ids())
        assert [(t.uuid, t.resolved_key, t.value) for t in added] == [
            ("new-1", "Subject", "Bio"),
            ("new-2", "License", ""),
        ]

    def test_canonical_existing_key_counts_as_present(self, course_framework):
        existing = [
            AssetTag(uuid="t1", key=CanonicalKey(id="other", title="License"), value="CC")
        ]
        added = synchronize(existing, course_framework)
        assert [t.resolved_key for t in added] == ["Subject"]

    def test_idempotent(self, course_framework):
        existing = [AssetTag(uuid="t1", key=PlainKey("Subject"), value="Bio")]
        first = synchronize(existing, course_framework)
        assert synchronize(existing + first, course_framework) == []

    def test_duplicate_existing_keys_count_once(self, course_framework):
        existing = [
            AssetTag(uuid="t1", key=PlainKey("Subject"), value="Bio"),
            AssetTag(uuid="t2", key=PlainKey("Subject"), value="Chem"),
        ]
        added = synchronize(existing, course_framework)
        assert [t.resolved_key for t in added] == ["License"]

    def test_framework_repeating_a_key_yields_one_tag(self):
        framework = TagFramework(
            id="f2",
            name="Repeats",
            templates=[
                TagTemplate(key=PlainKey("Level")),
                TagTemplate(key=PlainKey("Level"), value_type=TagValueType.NUMBER),
            ],
        )
        added = synchronize([], framework)
        assert len(added) == 1
        assert added[0].value == ""

    def test_none_or_empty_framework_yields_nothing(self):
        assert synchronize([], None) == []
        assert synchronize([], TagFramework(id="f", name="Empty")) == []

    def test_date_default_uses_now(self):
        framework = TagFramework(
            id="f3",
            name="Dated",
            templates=[TagTemplate(key=PlainKey("Published"), value_type=TagValueType.DATE)],
        )
        added = synchronize([], framework, now=NOW)
        assert added[0].value == NOW

    def test_list_defaults_are_not_shared(self):
        shared: list[str] = ["Bio"]
        framework = TagFramework(
            id="f4",
            name="Lists",
            templates=[
                TagTemplate(
                    key=PlainKey("Topics"),
                    value_type=TagValueType.MULTISELECT,
                    options=["Bio"],
                    default_value=shared,
                )
            ],
        )
        added = synchronize([], framework)
        added[0].value.append("Chem")
        assert shared == ["Bio"]

    def test_inputs_are_not_modified(self, course_framework):
        existing = [AssetTag(uuid="t1", key=PlainKey("Subject"), value="Bio")]
        synchronize(existing, course_framework)
        assert len(existing) == 1
        assert len(course_framework.templates) == 2
