"""
Unit tests for ReviewScheduler.

Tests:
- First-review interval table
- Lapse handling (rating < 3)
- Ease factor growth on passing ratings
- Interval clamping and rating coercion
"""

from datetime import timedelta

import pytest

from cadence.study.models import SpacedRepetitionSettings
from cadence.study.scheduler import RATING_INTERVALS, ReviewScheduler, calculate_next_review, coerce_rating


class TestFirstReview:
    @pytest.mark.parametrize("rating,expected", [(1, 1), (2, 2), (3, 4), (4, 7), (5, 14)])
    def test_interval_comes_from_rating_table(self, rating, expected, now):
        outcome = calculate_next_review(rating, now=now)

        assert outcome.new_interval == expected
        assert outcome.repetition_count == 1
        assert outcome.new_ease_factor == 2.5
        assert outcome.next_review_date == now + timedelta(days=expected)

    def test_prior_without_interval_counts_as_first_review(self, now):
        outcome = calculate_next_review(4, {"repetition_count": 2, "ease_factor": 2.1}, now=now)

        assert outcome.new_interval == 7
        assert outcome.new_ease_factor == 2.1
        assert outcome.repetition_count == 3

    def test_first_review_respects_min_interval(self, now):
        settings = SpacedRepetitionSettings(min_interval=3)
        outcome = calculate_next_review(1, settings=settings, now=now)
        assert outcome.new_interval == 3


class TestLapse:
    @pytest.mark.parametrize("rating", [1, 2])
    def test_lapse_resets_interval_and_lowers_ease(self, rating, now):
        prior = {"repetition_count": 4, "ease_factor": 2.0, "interval_days": 20}
        outcome = calculate_next_review(rating, prior, now=now)

        assert outcome.new_interval == 1
        assert outcome.new_ease_factor == pytest.approx(1.8)
        assert outcome.repetition_count == 5

    def test_ease_factor_never_drops_below_floor(self, now):
        prior = {"repetition_count": 9, "ease_factor": 1.4, "interval_days": 3}
        outcome = calculate_next_review(1, prior, now=now)
        assert outcome.new_ease_factor == 1.3

    def test_lapse_uses_configured_min_interval(self, now):
        settings = SpacedRepetitionSettings(min_interval=2)
        prior = {"repetition_count": 2, "ease_factor": 2.5, "interval_days": 14}
        outcome = calculate_next_review(2, prior, settings=settings, now=now)
        assert outcome.new_interval == 2


class TestPassingReview:
    def test_rating_five_grows_ease(self, now):
        prior = {"repetition_count": 2, "ease_factor": 2.5, "interval_days": 10}
        outcome = calculate_next_review(5, prior, now=now)

        assert outcome.new_ease_factor == pytest.approx(2.6)
        assert outcome.new_interval == 26

    def test_rating_four_keeps_ease(self, now):
        prior = {"repetition_count": 2, "ease_factor": 2.5, "interval_days": 10}
        outcome = calculate_next_review(4, prior, now=now)

        assert outcome.new_ease_factor == pytest.approx(2.5)
        assert outcome.new_interval == 25

    def test_rating_three_shrinks_ease(self, now):
        prior = {"repetition_count": 2, "ease_factor": 2.5, "interval_days": 10}
        outcome = calculate_next_review(3, prior, now=now)

        # 2.5 + 0.1 - 2 * (0.08 + 2 * 0.02) = 2.36
        assert outcome.new_ease_factor == pytest.approx(2.36)
        assert outcome.new_interval == 24

    def test_interval_clamped_to_max(self, now):
        settings = SpacedRepetitionSettings(max_interval=30)
        prior = {"repetition_count": 5, "ease_factor": 2.5, "interval_days": 25}
        outcome = calculate_next_review(5, prior, settings=settings, now=now)

        assert outcome.new_interval == 30
        assert outcome.next_review_date == now + timedelta(days=30)


class TestIntervalBounds:
    def test_interval_always_within_bounds(self, now):
        settings_grid = [
            SpacedRepetitionSettings(min_interval=1, max_interval=365),
            SpacedRepetitionSettings(min_interval=2, max_interval=10),
            SpacedRepetitionSettings(min_interval=5, max_interval=5),
        ]
        priors = [
            None,
            {"repetition_count": 1, "ease_factor": 1.3, "interval_days": 1},
            {"repetition_count": 7, "ease_factor": 3.1, "interval_days": 300},
        ]

        for settings in settings_grid:
            scheduler = ReviewScheduler(settings)
            for prior in priors:
                for rating in range(1, 6):
                    outcome = scheduler.calculate_next_review(rating, prior, now=now)
                    assert settings.min_interval <= outcome.new_interval <= settings.max_interval
                    assert outcome.new_ease_factor >= 1.3


class TestRatingCoercion:
    @pytest.mark.parametrize("rating", [0, 6, -1, 2.5, "5", None, True])
    def test_invalid_rating_is_treated_as_three(self, rating, now):
        outcome = calculate_next_review(rating, now=now)
        assert outcome.new_interval == RATING_INTERVALS[3]

    def test_valid_rating_passes_through(self):
        assert coerce_rating(5) == 5


class TestApplyReview:
    def test_new_item_then_lapse(self, now):
        """Rate 'Mitochondrion' 5, then 2 two weeks later."""
        scheduler = ReviewScheduler()

        record = scheduler.apply_review(None, 5, now=now)
        assert record.next_review_at == now + timedelta(days=14)
        assert record.repetition_count == 1
        assert record.ease_factor == 2.5
        assert record.last_reviewed_at == now

        later = now + timedelta(days=14)
        record = scheduler.apply_review(record, 2, now=later)
        assert record.interval_days == 1
        assert record.ease_factor == pytest.approx(2.3)
        assert record.repetition_count == 2
        assert record.rating == 2
        assert record.next_review_at == later + timedelta(days=1)

    def test_invalid_rating_is_stored_as_three(self, now):
        record = ReviewScheduler().apply_review(None, 9, now=now)
        assert record.rating == 3
        assert record.interval_days == 4

    def test_naive_now_is_stored_as_utc(self, now):
        record = ReviewScheduler().apply_review(None, 4, now=now.replace(tzinfo=None))

        assert record.last_reviewed_at == now
        assert record.next_review_at == now + timedelta(days=7)
        assert record.next_review_at.tzinfo is not None
