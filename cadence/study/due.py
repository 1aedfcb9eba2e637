"""
Due Set Selection.

Decides whether an item needs review now. Corrupt or ambiguous timestamps
never hide an item: anything that cannot be parsed counts as due.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Optional, TypeVar

from cadence.study.models import parse_timestamp, resolve_now

# Items reviewed before intervals were stored come back after a week
LEGACY_INTERVAL_DAYS = 7

SECONDS_PER_DAY = 24 * 60 * 60

ItemT = TypeVar("ItemT")


def item_field(item: Any, name: str) -> Any:
    """Read a scheduling field from a ReviewRecord, a mapping, or any object."""
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def days_since(timestamp: datetime, now: datetime) -> float:
    return (now - timestamp).total_seconds() / SECONDS_PER_DAY


def is_term_due_for_review(
    last_reviewed_at: Any = None,
    interval_days: Optional[float] = None,
    next_review_at: Any = None,
    now: Optional[datetime] = None,
) -> bool:
    """
    Check if an item is due for review.

    Order of evidence:
    1. Never reviewed -> due
    2. Explicit next review time -> due once it has passed
    3. Stored interval -> due once that many days have elapsed
    4. Legacy data -> due after LEGACY_INTERVAL_DAYS

    Args:
        last_reviewed_at: Time of the last review (datetime or ISO string)
        interval_days: Current interval in days
        next_review_at: Scheduled review time (datetime or ISO string)
        now: Reference time, defaults to the current UTC time

    Returns:
        True when the item should be reviewed
    """
    if not last_reviewed_at:
        return True

    now = resolve_now(now)

    if next_review_at:
        review_at = parse_timestamp(next_review_at)
        if review_at is None:
            return True
        return now >= review_at

    last_reviewed = parse_timestamp(last_reviewed_at)
    if last_reviewed is None:
        return True

    threshold = interval_days if interval_days else LEGACY_INTERVAL_DAYS
    return days_since(last_reviewed, now) >= threshold


def is_item_due(item: Any, now: Optional[datetime] = None) -> bool:
    """Apply is_term_due_for_review to a stored record or mapping."""
    return is_term_due_for_review(
        item_field(item, "last_reviewed_at"),
        item_field(item, "interval_days"),
        item_field(item, "next_review_at"),
        now=now,
    )


def select_due_items(items: Iterable[ItemT], now: Optional[datetime] = None) -> list[ItemT]:
    """Return the due items, preserving input order."""
    now = resolve_now(now)
    return [item for item in items if is_item_due(item, now)]


def count_due_items(items: Iterable[Any], now: Optional[datetime] = None) -> int:
    """Number of due items; the figure handed to reminder/notification code."""
    now = resolve_now(now)
    return sum(1 for item in items if is_item_due(item, now))
