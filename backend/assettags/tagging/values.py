"""Tag value model.

Each template declares one of a closed set of value types. This module owns
the shape of a valid value per type, the default a fresh tag receives, and
the conversions between wire values (JSON) and Python values.
"""

from __future__ import annotations

import math
import unicodedata
from collections.abc import Iterable
from datetime import date, datetime, timezone
from typing import Any

from assettags.tagging.enums import TagValueType
from assettags.tagging.models import TagTemplate

# Value types whose templates carry an options list
OPTION_VALUE_TYPES = frozenset({TagValueType.DROPDOWN, TagValueType.MULTISELECT})


def coerce_value_type(raw: Any) -> TagValueType:
    """Map a raw value type to the enum, failing closed to text."""
    if isinstance(raw, TagValueType):
        return raw
    if isinstance(raw, str):
        try:
            return TagValueType(raw.strip().lower())
        except ValueError:
            pass
    return TagValueType.TEXT


def clean_options(options: Iterable[Any] | None) -> list[str]:
    """Drop blank, duplicate and non-string options, keeping order."""
    cleaned: list[str] = []
    for option in options or []:
        if not isinstance(option, str) or not option.strip():
            continue
        if option not in cleaned:
            cleaned.append(option)
    return cleaned


def _option_sort_key(option: str) -> tuple[str, str]:
    stripped = "".join(
        ch for ch in option if not unicodedata.category(ch).startswith("P")
    )
    return (stripped.casefold(), option)


def sort_options(options: Iterable[Any] | None) -> list[str]:
    """Clean options and sort them alphabetically, ignoring punctuation."""
    return sorted(clean_options(options), key=_option_sort_key)


def default_for(template: TagTemplate, now: datetime | None = None) -> Any:
    """Return the value a new tag created from ``template`` starts with.

    A template's own ``default_value`` wins verbatim. Otherwise the default
    is derived from the value type; unknown types behave as text.

    Args:
        template: The template the tag is instantiated from.
        now: Timestamp used for date fields. Defaults to the current UTC time.
    """
    if template.default_value is not None:
        return template.default_value

    value_type = coerce_value_type(template.value_type)
    if value_type == TagValueType.DROPDOWN:
        options = clean_options(template.options)
        return options[0] if options else ""
    if value_type == TagValueType.MULTISELECT:
        return []
    if value_type == TagValueType.BOOLEAN:
        return False
    if value_type == TagValueType.NUMBER:
        return 0
    if value_type == TagValueType.DATE:
        return now if now is not None else datetime.now(timezone.utc)
    return ""


def is_empty_value(value: Any) -> bool:
    """Check whether a value counts as "no value"."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def conforms(
    value_type: Any,
    value: Any,
    options: Iterable[Any] | None = None,
) -> bool:
    """Check that ``value`` has the shape ``value_type`` requires.

    Dropdown values must be one of the template's options when it has any.
    Multiselect values may contain options added ad hoc by the editor.
    """
    value_type = coerce_value_type(value_type)

    if value_type == TagValueType.TEXT:
        return isinstance(value, str)
    if value_type == TagValueType.DROPDOWN:
        if not isinstance(value, str):
            return False
        allowed = clean_options(options)
        return not allowed or value in allowed
    if value_type == TagValueType.MULTISELECT:
        return isinstance(value, list) and all(isinstance(v, str) for v in value)
    if value_type == TagValueType.BOOLEAN:
        return isinstance(value, bool)
    if value_type == TagValueType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        return math.isfinite(value)
    if value_type == TagValueType.DATE:
        return isinstance(value, (datetime, date))
    return False


def parse_datetime(raw: str) -> datetime | None:
    """Parse an ISO 8601 timestamp, accepting a trailing ``Z``."""
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def coerce_value(value_type: Any, raw: Any) -> Any:
    """Convert a wire value to the Python shape of ``value_type``.

    Values that cannot be converted are returned unchanged so that
    validation can report them against the tag's key.
    """
    value_type = coerce_value_type(value_type)

    if value_type == TagValueType.DATE:
        if isinstance(raw, str):
            parsed = parse_datetime(raw)
            return parsed if parsed is not None else raw
        if isinstance(raw, date) and not isinstance(raw, datetime):
            return datetime(raw.year, raw.month, raw.day, tzinfo=timezone.utc)
        return raw

    if value_type == TagValueType.NUMBER and isinstance(raw, str):
        try:
            return int(raw)
        except ValueError:
            try:
                return float(raw)
            except ValueError:
                return raw

    if value_type == TagValueType.BOOLEAN and isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in ("true", "yes", "1"):
            return True
        if lowered in ("false", "no", "0"):
            return False
        return raw

    if value_type == TagValueType.MULTISELECT:
        if isinstance(raw, tuple):
            return list(raw)
        if isinstance(raw, str):
            return [raw] if raw.strip() else []

    return raw


def value_to_wire(value: Any) -> Any:
    """Convert a Python value to its JSON form."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, tuple):
        return list(value)
    return value


def with_added_option(value: Any, option: str) -> list[str]:
    """Add an ad hoc option to a multiselect value.

    The option is scoped to this value only; the template's shared option
    list is never modified.
    """
    current = [v for v in value if isinstance(v, str)] if isinstance(value, list) else []
    if isinstance(option, str) and option.strip() and option not in current:
        current.append(option)
    return current
