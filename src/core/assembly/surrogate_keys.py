"""
Surrogate key assignment and natural-key lookups.
"""

from collections.abc import Callable, Hashable, Iterable
from typing import Any, TypeVar

from src.observability.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def assign_surrogate_keys(
    records: Iterable[T],
    sort_key: Callable[[T], Any],
) -> list[tuple[int, T]]:
    """
    Assign dense surrogate keys 1..n in a deterministic order.

    Records are sorted by sort_key (stable, so equal keys keep input order)
    and numbered consecutively. Identical input always yields identical keys.

    Args:
        records: Deduplicated records of one dimension
        sort_key: Deterministic ordering key

    Returns:
        List of (surrogate_key, record) in key order
    """
    ordered = sorted(records, key=sort_key)
    return list(enumerate(ordered, start=1))


def index_by(
    records: Iterable[T],
    key: Callable[[T], Hashable | None],
    name: str = "lookup",
) -> dict[Hashable, T]:
    """
    Build a natural-key lookup for a left-outer join.

    The first record wins when a key repeats; records with a None key are
    not indexed.
    """
    index: dict[Hashable, T] = {}
    duplicates = 0
    for record in records:
        value = key(record)
        if value is None:
            continue
        if value in index:
            duplicates += 1
            continue
        index[value] = record

    if duplicates:
        logger.warning(
            f"{name}: {duplicates} duplicate lookup key(s) ignored",
            extra={"lookup": name, "duplicates": duplicates},
        )
    return index
