"""Per-topic accuracy and response time for practice results."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from cadence.study.due import item_field
from cadence.study.models import PerformanceMetric


def analyze_interleaving_performance(results: Iterable[Any]) -> list[PerformanceMetric]:
    """
    Group results by topic.

    Args:
        results: SessionResult objects or mappings with topic, correct, response_time_ms

    Returns:
        One PerformanceMetric per topic, in order of first appearance
    """
    stats: dict[str, dict[str, float]] = {}

    for result in results:
        topic = item_field(result, "topic")
        topic_stats = stats.setdefault(topic, {"correct": 0, "total": 0, "total_time": 0.0})
        topic_stats["total"] += 1
        topic_stats["total_time"] += item_field(result, "response_time_ms") or 0
        if item_field(result, "correct"):
            topic_stats["correct"] += 1

    return [
        PerformanceMetric(
            topic=topic,
            correct_count=int(s["correct"]),
            total_count=int(s["total"]),
            accuracy=s["correct"] / s["total"],
            avg_response_time_ms=s["total_time"] / s["total"],
        )
        for topic, s in stats.items()
    ]
