"""
Session Prioritizer.

Orders due items (earliest effective due date first, weaker ratings first on
ties) and caps how many of them one session should cover.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any, Callable, Optional, TypeVar

from cadence.study.due import item_field
from cadence.study.models import parse_timestamp

ItemT = TypeVar("ItemT")

# (upper bound of due items, session size)
SESSION_SIZE_STEPS = (
    (30, 15),
    (50, 20),
)
MAX_SESSION_SIZE = 25


def effective_due_date(item: Any) -> Optional[datetime]:
    """
    Due date used for ordering.

    next_review_at when present, else last_reviewed_at + interval_days,
    else None (undated).
    """
    next_review_at = item_field(item, "next_review_at")
    if next_review_at:
        return parse_timestamp(next_review_at)

    last_reviewed = parse_timestamp(item_field(item, "last_reviewed_at"))
    interval_days = item_field(item, "interval_days")
    if last_reviewed is not None and interval_days:
        return last_reviewed + timedelta(days=interval_days)

    return None


def sort_terms_by_priority(
    items: Iterable[ItemT],
    undated_first: bool = True,
    key: Optional[Callable[[ItemT], Any]] = None,
) -> list[ItemT]:
    """
    Sort items by review priority.

    Args:
        items: Records or mappings with scheduling fields
        undated_first: Place items without any usable due date before (True)
            or after (False) every dated item
        key: Extracts the scheduling record from each item (default: the item itself)

    Returns:
        New list, earliest due first; equal due dates by ascending rating
    """
    undated_rank = 0 if undated_first else 2

    def sort_key(item: Any) -> tuple[int, float, int]:
        if key is not None:
            item = key(item)
        due = effective_due_date(item)
        rating = item_field(item, "rating") or 0
        if due is None:
            return (undated_rank, 0.0, rating)
        return (1, due.timestamp(), rating)

    return sorted(items, key=sort_key)


def get_recommended_session_size(due_count: int) -> int:
    """Session size for a number of due items, capped for cognitive load."""
    if due_count <= 10:
        return max(0, due_count)

    for upper_bound, size in SESSION_SIZE_STEPS:
        if due_count <= upper_bound:
            return size

    return MAX_SESSION_SIZE
