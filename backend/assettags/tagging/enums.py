"""Enum types shared by the tagging engine and the database models."""

from __future__ import annotations

import enum


class TagValueType(str, enum.Enum):
    """Value types a tag template can declare."""

    TEXT = "text"
    DROPDOWN = "dropdown"
    MULTISELECT = "multiselect"
    BOOLEAN = "boolean"
    NUMBER = "number"
    DATE = "date"


class BulkApplyPolicy(str, enum.Enum):
    """Conflict policy for applying one tag set to many files."""

    REPLACE = "replace"
    MERGE = "merge"
