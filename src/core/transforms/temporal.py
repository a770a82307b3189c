"""
Derived validity ranges for versioned entities.

Versions carry a start date and no end date. For each business key the
versions are sorted by start date; each version ends one day before the
next one starts, and the last version stays open (end = None).
"""

from collections.abc import Callable, Hashable, Iterable
from datetime import date, timedelta
from typing import Any, TypeVar

from .deduplication import group_by_key

T = TypeVar("T")

ONE_DAY = timedelta(days=1)


def derive_ranges(starts: list[date]) -> list[date | None]:
    """
    Compute end dates for an ascending list of start dates.

    Examples:
        >>> derive_ranges([date(2021, 1, 1), date(2021, 6, 1), date(2022, 1, 1)])
        [datetime.date(2021, 5, 31), datetime.date(2021, 12, 31), None]
    """
    ends: list[date | None] = [nxt - ONE_DAY for nxt in starts[1:]]
    ends.append(None)
    return ends


def assign_validity_ranges(
    records: Iterable[T],
    business_key: Callable[[T], Hashable],
    start: Callable[[T], date],
    tie_break: Callable[[T], Any],
    with_end: Callable[[T, date | None], T],
) -> list[T]:
    """
    Attach derived end dates to every version of every business key.

    Rebuilt from scratch on every call; identical input gives identical
    output.

    Args:
        records: Versions of one or more business keys
        business_key: Groups versions of the same entity
        start: Start date of a version (must not be None)
        tie_break: Secondary sort key for versions with equal start dates
        with_end: Returns a copy of a version with the given end date

    Returns:
        Versions grouped by business key (first-appearance order), each
        group sorted by (start, tie_break)
    """
    groups, _ = group_by_key(records, business_key)

    ranged: list[T] = []
    for versions in groups.values():
        ordered = sorted(versions, key=lambda v: (start(v), tie_break(v)))
        ends = derive_ranges([start(v) for v in ordered])
        ranged.extend(with_end(version, end) for version, end in zip(ordered, ends))
    return ranged
