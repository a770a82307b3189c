"""
Deduplication and latest-record selection.

Groups records by business key and keeps the one with the greatest
secondary order key (e.g. the latest creation date).

Tie-break: when two records share both business key and order key, the
one seen first in input order wins. A missing order key ranks below any
present one.
"""

from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import Any, NamedTuple, TypeVar

T = TypeVar("T")


class DeduplicationResult(NamedTuple):
    """Survivors of deduplication plus what was dropped."""

    records: list[Any]
    null_keys_dropped: int
    duplicates_dropped: int


def _rank(order_key: Any) -> tuple[bool, Any]:
    # None ranks lowest; equal tuples compare equal so sorted() stays stable
    return (order_key is not None, order_key)


def select_latest(records: Sequence[T], order_key: Callable[[T], Any]) -> T:
    """
    Return the single record with the maximum secondary order key.

    Args:
        records: Records sharing one business key (must not be empty)
        order_key: Extracts the secondary order key from a record

    Returns:
        The latest record; first-seen wins on ties

    Raises:
        ValueError: If records is empty
    """
    if not records:
        raise ValueError("select_latest requires at least one record")

    # sorted() is stable for reverse=True too, so input order decides ties
    ranked = sorted(records, key=lambda r: _rank(order_key(r)), reverse=True)
    return ranked[0]


def group_by_key(
    records: Iterable[T],
    business_key: Callable[[T], Hashable | None],
) -> tuple[dict[Hashable, list[T]], int]:
    """
    Group records by business key, preserving first-appearance order.

    Returns:
        Tuple of (groups, null_key_count); records with a None key are dropped
    """
    groups: dict[Hashable, list[T]] = {}
    null_keys = 0
    for record in records:
        key = business_key(record)
        if key is None:
            null_keys += 1
            continue
        groups.setdefault(key, []).append(record)
    return groups, null_keys


def deduplicate(
    records: Iterable[T],
    business_key: Callable[[T], Hashable | None],
    order_key: Callable[[T], Any],
) -> DeduplicationResult:
    """
    Keep exactly one record per non-null business key.

    Pure and idempotent: deduplicating the output again returns it unchanged.

    Args:
        records: Input records
        business_key: Extracts the business key (None drops the record)
        order_key: Extracts the secondary order key

    Returns:
        DeduplicationResult with survivors in first-appearance order of their key
    """
    groups, null_keys = group_by_key(records, business_key)

    survivors = [select_latest(group, order_key) for group in groups.values()]
    duplicates = sum(len(group) - 1 for group in groups.values())

    return DeduplicationResult(
        records=survivors,
        null_keys_dropped=null_keys,
        duplicates_dropped=duplicates,
    )
