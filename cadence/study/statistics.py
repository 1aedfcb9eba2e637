"""Spaced repetition progress figures over a learner's review records."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from cadence.study.due import is_item_due, item_field
from cadence.study.models import resolve_now, round_half_up

WELL_KNOWN_RATING = 4
MASTERED_RATING = 5
MASTERED_INTERVAL_DAYS = 30


@dataclass
class SpacedRepetitionStats:
    """Progress summary across all stored items."""

    total_items: int = 0
    reviewed_items: int = 0
    due_items: int = 0
    average_interval: float = 0.0
    retention_rate: float = 0.0  # percent of reviewed items rated >= 4
    mastered_items: int = 0


def get_spaced_repetition_stats(
    records: Iterable[Any],
    now: Optional[datetime] = None,
) -> SpacedRepetitionStats:
    """
    Summarise review records.

    Args:
        records: ReviewRecord objects or mappings with the same field names
        now: Reference time for the due count

    Returns:
        SpacedRepetitionStats (averages and rates rounded to one decimal)
    """
    now = resolve_now(now)
    records = list(records)

    reviewed = [r for r in records if item_field(r, "rating") and item_field(r, "last_reviewed_at")]
    intervals = [item_field(r, "interval_days") for r in records if item_field(r, "interval_days")]
    well_known = [r for r in records if (item_field(r, "rating") or 0) >= WELL_KNOWN_RATING]
    mastered = [
        r for r in records
        if item_field(r, "rating") == MASTERED_RATING
        and (item_field(r, "interval_days") or 0) >= MASTERED_INTERVAL_DAYS
    ]

    average_interval = sum(intervals) / len(intervals) if intervals else 0.0
    retention_rate = len(well_known) / len(reviewed) * 100 if reviewed else 0.0

    return SpacedRepetitionStats(
        total_items=len(records),
        reviewed_items=len(reviewed),
        due_items=sum(1 for r in records if is_item_due(r, now)),
        average_interval=round_half_up(average_interval, 1),
        retention_rate=round_half_up(retention_rate, 1),
        mastered_items=len(mastered),
    )
