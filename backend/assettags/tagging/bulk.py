"""Conflict policies for applying one tag set to a file."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from assettags.tagging.enums import BulkApplyPolicy
from assettags.tagging.keys import resolve_key
from assettags.tagging.models import AssetTag, new_tag_id
from assettags.tagging.values import coerce_value


def _fresh_copy(tag: AssetTag, make_id: Callable[[], str]) -> AssetTag:
    value = list(tag.value) if isinstance(tag.value, list) else tag.value
    return tag.copy(uuid=make_id(), value=value)


def apply_policy(
    existing: Iterable[AssetTag],
    supplied: Iterable[AssetTag],
    policy: BulkApplyPolicy,
    id_factory: Callable[[], str] | None = None,
) -> list[AssetTag]:
    """Compute a file's tag set after a bulk apply.

    ``replace`` discards ``existing`` entirely. ``merge`` keeps ``existing``,
    overwrites the value of any tag whose resolved key matches a supplied tag
    (last writer wins, lists are not merged) and appends the rest. An
    overwritten tag keeps its framework, so the new value is converted to
    its template type; the result still needs validating before it is saved.

    Supplied tags are copied with fresh identifiers so the same input can be
    applied to several files. Neither input is modified.
    """
    make_id = id_factory or new_tag_id
    supplied = list(supplied)

    if BulkApplyPolicy(policy) == BulkApplyPolicy.REPLACE:
        return [_fresh_copy(tag, make_id) for tag in supplied]

    merged = [tag.copy() for tag in existing]
    index: dict[str, int] = {}
    for position, tag in enumerate(merged):
        index.setdefault(resolve_key(tag.key), position)

    for tag in supplied:
        resolved = resolve_key(tag.key)
        value = list(tag.value) if isinstance(tag.value, list) else tag.value
        if resolved in index:
            target = merged[index[resolved]]
            template = target.template
            if template is not None:
                value = coerce_value(template.value_type, value)
            target.value = value
            continue
        index[resolved] = len(merged)
        merged.append(_fresh_copy(tag, make_id))

    return merged
