"""
Recommendation Generator.

Turns per-topic metrics into fixed guidance messages. Rules run in a fixed
order and several may fire for the same session:
1. Weak topics (accuracy below 60%)
2. Slow topics (average response time above 1.5x the mean)
3. Uneven practice (largest topic count more than twice the smallest)
4. Overall assessment by mean accuracy
"""

from __future__ import annotations

from collections.abc import Sequence

from cadence.study.models import PerformanceMetric

WEAK_ACCURACY_THRESHOLD = 0.6
SLOW_RESPONSE_FACTOR = 1.5
UNEVEN_COUNT_FACTOR = 2
EXCELLENT_ACCURACY = 0.8
GOOD_ACCURACY = 0.6

FOCUS_WEAK_TOPICS = "Focus on weaker topics: {topics}"
DEEPEN_SLOW_TOPICS = "Time-intensive topics for deeper practice: {topics}"
EVEN_DISTRIBUTION = "Recommendation: distribute practice time more evenly across all topics"
EXCELLENT_OVERALL = "Excellent overall performance! Interleaving is showing positive effects."
KEEP_GOING = "Good progress. Keep going with interleaved learning for optimal retention."
REDUCE_TOPICS = "Tip: reduce the number of parallel topics for better focus."


def _join_topics(metrics: list[PerformanceMetric]) -> str:
    return ", ".join(m.topic for m in metrics)


def generate_interleaving_recommendations(metrics: Sequence[PerformanceMetric]) -> list[str]:
    """
    Build guidance messages for a finished session.

    Args:
        metrics: Per-topic metrics from analyze_interleaving_performance

    Returns:
        Messages in rule order; empty when there are no metrics
    """
    if not metrics:
        return []

    recommendations: list[str] = []

    weak_topics = [m for m in metrics if m.accuracy < WEAK_ACCURACY_THRESHOLD]
    if weak_topics:
        recommendations.append(FOCUS_WEAK_TOPICS.format(topics=_join_topics(weak_topics)))

    mean_response_time = sum(m.avg_response_time_ms for m in metrics) / len(metrics)
    slow_topics = [m for m in metrics if m.avg_response_time_ms > mean_response_time * SLOW_RESPONSE_FACTOR]
    if slow_topics:
        recommendations.append(DEEPEN_SLOW_TOPICS.format(topics=_join_topics(slow_topics)))

    counts = [m.total_count for m in metrics]
    if max(counts) > min(counts) * UNEVEN_COUNT_FACTOR:
        recommendations.append(EVEN_DISTRIBUTION)

    mean_accuracy = sum(m.accuracy for m in metrics) / len(metrics)
    if mean_accuracy >= EXCELLENT_ACCURACY:
        recommendations.append(EXCELLENT_OVERALL)
    elif mean_accuracy >= GOOD_ACCURACY:
        recommendations.append(KEEP_GOING)
    else:
        recommendations.append(REDUCE_TOPICS)

    return recommendations
