"""Tests for logging configuration."""

from __future__ import annotations

import structlog

from assettags.core.config import settings
from assettags.core.logging import add_org_id, build_processors


class TestAddOrgId:
    """Tests for the organization processor."""

    def test_adds_configured_org(self):
        event = add_org_id(None, "info", {"event": "tags_persisted"})
        assert event["org_id"] == settings.org_id

    def test_keeps_bound_org(self):
        event = add_org_id(None, "info", {"event": "tags_persisted", "org_id": "org-9"})
        assert event["org_id"] == "org-9"


class TestBuildProcessors:
    """Tests for the renderer choice."""

    def test_json_outside_debug(self):
        processors = build_processors(debug=False)
        assert add_org_id in processors
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_in_debug(self):
        processors = build_processors(debug=True)
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
