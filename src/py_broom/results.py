"""Filtering and ordering of UsageRecords."""

import logging

from .models import UsageRecord

log = logging.getLogger(__name__)

SORT_KEYS: tuple[str, ...] = ("name", "file", "usages")
DEFAULT_SORT_KEY = "file"


def filter_by_usage_count(
    records: list[UsageRecord],
    min_usages: int = -1,
    max_usages: int = -1,
) -> list[UsageRecord]:
    """Keep records whose total_usages lies within the inclusive bounds (negative = unbounded)."""
    filtered: list[UsageRecord] = []
    for record in records:
        if min_usages >= 0 and record.total_usages < min_usages:
            continue
        if max_usages >= 0 and record.total_usages > max_usages:
            continue
        filtered.append(record)
    return filtered


def _by_name(r: UsageRecord) -> tuple:
    d = r.definition
    return (d.name, d.filename, d.line_number)


def _by_file(r: UsageRecord) -> tuple:
    d = r.definition
    return (d.filename, d.line_number, d.name)


def _by_usages(r: UsageRecord) -> tuple:
    d = r.definition
    return (r.total_usages, d.name, d.filename, d.line_number)


_SORT_FUNCS = {
    "name": _by_name,
    "file": _by_file,
    "usages": _by_usages,
}


def sort_records(
    records: list[UsageRecord],
    sort_by: str = DEFAULT_SORT_KEY,
    ascending: bool = True,
) -> list[UsageRecord]:
    """
    Return records ordered by `sort_by`; unknown keys fall back to "file".

    The key is a full tuple (primary field, then name, then location), so
    descending order reverses the tie-breaks along with the primary field.
    """
    key = (sort_by or "").lower()
    if key not in _SORT_FUNCS:
        log.debug("Unknown sort key %r, sorting by %s", sort_by, DEFAULT_SORT_KEY)
        key = DEFAULT_SORT_KEY
    return sorted(records, key=_SORT_FUNCS[key], reverse=not ascending)
