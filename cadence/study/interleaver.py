"""
Interleaving Engine for practice sessions.

Builds a practice order that mixes topics instead of blocking them:
- Weighted round-robin: topics with more weight are drawn more often
- Forced context switches every `context_switch_frequency` items
- Sequential fallback when interleaving is disabled or too few topics exist

Selection is random by design; pass a seeded random.Random for repeatable output.
"""
from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from loguru import logger

from cadence.study.models import InterleavedSequence, InterleavingSettings, TopicGroup


class RandomSource(Protocol):
    """Anything with random() -> float in [0, 1), e.g. random.Random."""

    def random(self) -> float: ...


@dataclass
class _TopicQueue:
    topic_id: str
    weight: float
    items: deque = field(default_factory=deque)


def calculate_effectiveness(topic_distribution: dict[str, int], total_items: int) -> float:
    """
    Score how evenly items are spread across topics.

    1.0 means a perfectly even split; the variance of the per-topic counts is
    normalised by the largest variance possible for that number of topics.

    Returns:
        Score in [0, 1]; 0 when fewer than two topics contributed
    """
    topics = [t for t, count in topic_distribution.items() if count > 0]
    if len(topics) < 2 or total_items <= 0:
        return 0.0

    avg_per_topic = total_items / len(topics)
    variance = sum((topic_distribution[t] - avg_per_topic) ** 2 for t in topics) / len(topics)
    max_variance = avg_per_topic * avg_per_topic * (len(topics) - 1)

    return max(0.0, 1.0 - variance / max_variance)


class InterleavingEngine:
    """
    Generates interleaved practice sequences from topic groups.

    The algorithm:
    1. Drop topic groups without items
    2. Fall back to sequential order if disabled or too few topics remain
    3. Draw topics by weight, forcing a different topic every N items
    4. Pop one item per draw until every topic is exhausted
    """

    def __init__(
        self,
        settings: Optional[InterleavingSettings] = None,
        rng: Optional[RandomSource] = None,
    ):
        """
        Initialize engine.

        Args:
            settings: InterleavingSettings or None for defaults
            rng: Random source or None for a fresh random.Random()
        """
        self.settings = settings or InterleavingSettings()
        self.rng = rng or random.Random()

    def generate(self, topic_groups: list[TopicGroup]) -> InterleavedSequence:
        """
        Build the practice sequence.

        Args:
            topic_groups: Topic groups in presentation order

        Returns:
            InterleavedSequence with sequence, distribution, switches and effectiveness
        """
        settings = self.settings
        valid_groups = [g for g in topic_groups if g.items]

        if not settings.enabled or len(valid_groups) < settings.min_topics_to_interleave:
            return self._sequential(valid_groups)

        queues = [_TopicQueue(g.topic_id, g.weight, deque(g.items)) for g in valid_groups]
        topic_distribution = {q.topic_id: 0 for q in queues}
        sequence: list[Any] = []
        context_switches = 0
        last_topic: Optional[str] = None

        while True:
            available = [q for q in queues if q.items]
            if not available:
                break

            total_weight = sum(q.weight for q in available)
            should_switch_context = (
                last_topic is not None
                and len(available) > 1
                and len(sequence) % settings.context_switch_frequency == 0
            )

            if should_switch_context:
                selected = self._draw_other_topic(available, last_topic, total_weight)
            else:
                selected = self._draw_topic(available, total_weight)

            sequence.append(selected.items.popleft())
            topic_distribution[selected.topic_id] += 1

            if last_topic is not None and last_topic != selected.topic_id:
                context_switches += 1
            last_topic = selected.topic_id

        effectiveness = calculate_effectiveness(topic_distribution, len(sequence))

        logger.debug(
            f"Interleaved {len(sequence)} items across {len(queues)} topics "
            f"({context_switches} switches, effectiveness {effectiveness:.2f})"
        )

        return InterleavedSequence(
            sequence=sequence,
            topic_distribution=topic_distribution,
            context_switches=context_switches,
            effectiveness=effectiveness,
        )

    def _sequential(self, groups: list[TopicGroup]) -> InterleavedSequence:
        """Concatenate topics in input order."""
        topic_distribution: dict[str, int] = {}
        for g in groups:
            topic_distribution[g.topic_id] = topic_distribution.get(g.topic_id, 0) + len(g.items)

        return InterleavedSequence(
            sequence=[item for g in groups for item in g.items],
            topic_distribution=topic_distribution,
            context_switches=0,
            effectiveness=0.0,
        )

    def _draw_other_topic(
        self,
        available: list[_TopicQueue],
        last_topic: str,
        total_weight: float,
    ) -> _TopicQueue:
        """
        Weighted draw that skips the last topic.

        Probabilities stay normalised against the total weight of all available
        topics (including the skipped one) and are scaled by the shuffle bias, so
        a draw can miss every candidate; it then lands on the first available topic.
        """
        bias = 1 + self.settings.shuffle_intensity * 0.1
        others = [q for q in available if q.topic_id != last_topic]
        if not others:
            return available[0]

        rand = self.rng.random()
        cumulative = 0.0
        for queue in others:
            cumulative += (queue.weight / total_weight) * bias
            if rand <= cumulative:
                return queue

        return available[0]

    def _draw_topic(self, available: list[_TopicQueue], total_weight: float) -> _TopicQueue:
        """Weight-proportional draw over every available topic."""
        rand = self.rng.random() * total_weight
        cumulative = 0.0
        for queue in available:
            cumulative += queue.weight
            if rand <= cumulative:
                return queue

        return available[0]


def generate_interleaved_sequence(
    topic_groups: list[TopicGroup],
    settings: Optional[InterleavingSettings] = None,
    rng: Optional[RandomSource] = None,
) -> InterleavedSequence:
    """Interleave topic groups with the given (or default) settings."""
    return InterleavingEngine(settings, rng).generate(topic_groups)
