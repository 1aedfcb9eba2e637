"""
Review Scheduler - spaced repetition interval calculation.

An SM-2 adaptation driven by a 1-5 self-rating:
- First rating: interval comes from a fixed rating table
- Lapse (rating < 3): interval resets to the minimum, ease factor drops by 0.2
- Pass (rating >= 3): ease factor is adjusted, interval grows by the ease factor

Invalid ratings are coerced to 3 rather than rejected.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any, Optional

from loguru import logger

from cadence.study.models import (
    DEFAULT_RATING,
    MAX_RATING,
    MIN_EASE_FACTOR,
    MIN_RATING,
    PASSING_RATING,
    ReviewOutcome,
    ReviewRecord,
    SpacedRepetitionSettings,
    resolve_now,
    round_half_up,
)

# First-review interval (days) per rating
RATING_INTERVALS = {
    1: 1,   # very poor understanding - review tomorrow
    2: 2,
    3: 4,
    4: 7,   # good understanding - review in a week
    5: 14,  # excellent understanding - review in two weeks
}

LAPSE_EASE_PENALTY = 0.2


def coerce_rating(rating: Any) -> int:
    """Return rating if it is an integer in 1-5, otherwise the default rating 3."""
    if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        logger.warning(f"Invalid rating value: {rating!r}. Using default rating of {DEFAULT_RATING}.")
        return DEFAULT_RATING
    return rating


def _prior_value(prior: Any, name: str) -> Any:
    if prior is None:
        return None
    if isinstance(prior, Mapping):
        return prior.get(name)
    return getattr(prior, name, None)


class ReviewScheduler:
    """
    Computes the next interval, ease factor and due date for one item.

    Prior state may be a ReviewRecord or any mapping/object exposing
    repetition_count, ease_factor and interval_days.
    """

    def __init__(self, settings: Optional[SpacedRepetitionSettings] = None):
        self.settings = settings or SpacedRepetitionSettings()

    def calculate_next_review(
        self,
        rating: Any,
        prior: Any = None,
        now: Optional[datetime] = None,
    ) -> ReviewOutcome:
        """
        Schedule the next review for a rating.

        Args:
            rating: Self-rating 1-5 (coerced to 3 when invalid)
            prior: Previous scheduling state, None for a new item
            now: Reference time, defaults to the current UTC time

        Returns:
            ReviewOutcome with next_review_date, new_interval, new_ease_factor, repetition_count
        """
        now = resolve_now(now)
        rating = coerce_rating(rating)
        settings = self.settings

        repetition_count = (_prior_value(prior, "repetition_count") or 0) + 1
        ease_factor = _prior_value(prior, "ease_factor") or settings.ease_factor
        previous_interval = _prior_value(prior, "interval_days")

        if repetition_count == 1 or not previous_interval:
            new_interval = RATING_INTERVALS[rating]
        elif rating < PASSING_RATING:
            ease_factor = max(MIN_EASE_FACTOR, ease_factor - LAPSE_EASE_PENALTY)
            new_interval = settings.min_interval
        else:
            miss = MAX_RATING - rating
            ease_factor = max(MIN_EASE_FACTOR, ease_factor + 0.1 - miss * (0.08 + miss * 0.02))
            new_interval = int(round_half_up(previous_interval * ease_factor))

        new_interval = max(settings.min_interval, min(settings.max_interval, new_interval))

        return ReviewOutcome(
            next_review_date=now + timedelta(days=new_interval),
            new_interval=new_interval,
            new_ease_factor=round_half_up(ease_factor, 2),
            repetition_count=repetition_count,
        )

    def apply_review(
        self,
        record: Optional[ReviewRecord],
        rating: Any,
        now: Optional[datetime] = None,
    ) -> ReviewRecord:
        """
        Produce the updated record for an item after a rating.

        A missing record means the item is rated for the first time.
        """
        now = resolve_now(now)
        rating = coerce_rating(rating)
        outcome = self.calculate_next_review(rating, record, now=now)

        return ReviewRecord(
            rating=rating,
            last_reviewed_at=now,
            repetition_count=outcome.repetition_count,
            ease_factor=outcome.new_ease_factor,
            interval_days=outcome.new_interval,
            next_review_at=outcome.next_review_date,
        )


def calculate_next_review(
    rating: Any,
    prior: Any = None,
    settings: Optional[SpacedRepetitionSettings] = None,
    now: Optional[datetime] = None,
) -> ReviewOutcome:
    """Schedule one rating with the given (or default) settings."""
    return ReviewScheduler(settings).calculate_next_review(rating, prior, now=now)
