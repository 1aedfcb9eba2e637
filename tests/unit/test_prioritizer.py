"""Unit tests for review prioritisation and session sizing."""

from datetime import timedelta

import pytest

from cadence.study.prioritizer import effective_due_date, get_recommended_session_size, sort_terms_by_priority


class TestRecommendedSessionSize:
    @pytest.mark.parametrize(
        "due_count,expected",
        [(0, 0), (5, 5), (10, 10), (11, 15), (15, 15), (30, 15), (31, 20), (35, 20), (50, 20), (51, 25), (100, 25)],
    )
    def test_session_size_steps(self, due_count, expected):
        assert get_recommended_session_size(due_count) == expected


class TestSortTermsByPriority:
    def test_earlier_due_date_comes_first(self, now):
        items = [
            {"id": "late", "rating": 1, "next_review_at": now + timedelta(days=3)},
            {"id": "early", "rating": 5, "next_review_at": now - timedelta(days=3)},
            {"id": "middle", "rating": 3, "next_review_at": now},
        ]
        assert [i["id"] for i in sort_terms_by_priority(items)] == ["early", "middle", "late"]

    def test_equal_due_dates_order_by_rating(self, now):
        due = now.isoformat()
        items = [
            {"id": "strong", "rating": 5, "next_review_at": due},
            {"id": "weak", "rating": 1, "next_review_at": due},
            {"id": "ok", "rating": 3, "next_review_at": due},
        ]
        assert [i["id"] for i in sort_terms_by_priority(items)] == ["weak", "ok", "strong"]

    def test_interval_derived_due_date(self, now):
        item = {"last_reviewed_at": now - timedelta(days=10), "interval_days": 4}
        assert effective_due_date(item) == now - timedelta(days=6)

        items = [
            {"id": "explicit", "next_review_at": now - timedelta(days=2)},
            item | {"id": "derived"},
        ]
        assert [i["id"] for i in sort_terms_by_priority(items)] == ["derived", "explicit"]

    def test_undated_placement_is_configurable(self, now):
        items = [
            {"id": "dated", "rating": 1, "next_review_at": now},
            {"id": "undated", "rating": 4},
        ]
        assert [i["id"] for i in sort_terms_by_priority(items)] == ["undated", "dated"]
        assert [i["id"] for i in sort_terms_by_priority(items, undated_first=False)] == ["dated", "undated"]

    def test_key_extracts_record(self, now):
        entries = [
            ("b", {"rating": 2, "next_review_at": now + timedelta(days=1)}),
            ("a", {"rating": 2, "next_review_at": now - timedelta(days=1)}),
        ]
        ordered = sort_terms_by_priority(entries, key=lambda entry: entry[1])
        assert [item_id for item_id, _ in ordered] == ["a", "b"]

    def test_input_is_not_mutated(self, now):
        items = [
            {"rating": 2, "next_review_at": now + timedelta(days=1)},
            {"rating": 2, "next_review_at": now - timedelta(days=1)},
        ]
        original = list(items)
        sort_terms_by_priority(items)
        assert items == original
