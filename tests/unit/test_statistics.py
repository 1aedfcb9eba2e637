"""Unit tests for spaced repetition statistics."""

from datetime import timedelta

from cadence.study.statistics import get_spaced_repetition_stats


class TestSpacedRepetitionStats:
    def test_empty(self, now):
        stats = get_spaced_repetition_stats([], now=now)

        assert stats.total_items == 0
        assert stats.reviewed_items == 0
        assert stats.due_items == 0
        assert stats.average_interval == 0
        assert stats.retention_rate == 0
        assert stats.mastered_items == 0

    def test_mixed_records(self, now):
        records = [
            {
                "rating": 5,
                "last_reviewed_at": now - timedelta(days=1),
                "interval_days": 40,
                "next_review_at": now + timedelta(days=39),
            },
            {
                "rating": 4,
                "last_reviewed_at": now - timedelta(days=2),
                "interval_days": 7,
                "next_review_at": now + timedelta(days=5),
            },
            {
                "rating": 1,
                "last_reviewed_at": now - timedelta(days=3),
                "interval_days": 1,
                "next_review_at": now - timedelta(days=2),
            },
            {"rating": None, "last_reviewed_at": None},
        ]

        stats = get_spaced_repetition_stats(records, now=now)

        assert stats.total_items == 4
        assert stats.reviewed_items == 3
        assert stats.due_items == 2
        assert stats.average_interval == 16.0
        assert stats.retention_rate == 66.7
        assert stats.mastered_items == 1

    def test_naive_now_is_utc(self, now):
        records = [
            {"rating": 2, "last_reviewed_at": now - timedelta(days=2), "interval_days": 1},
            {"rating": 4, "last_reviewed_at": "2024-02-29T09:00:00", "next_review_at": "2024-03-07T09:00:00"},
        ]

        stats = get_spaced_repetition_stats(records, now=now.replace(tzinfo=None))

        assert stats.due_items == 1
