"""
Study Engine Data Model.

Persisted shapes are pydantic models so they can be read back fail-open from
the key-value store; ephemeral algorithm inputs and outputs are dataclasses.

Design:
- SpacedRepetitionSettings / InterleavingSettings: per-learner tuning knobs
- ReviewRecord: scheduling state of one learned item
- TopicGroup / InterleavedSequence: interleaving input and output
- PracticeSession / SessionResult / PerformanceMetric: one sitting and its outcome
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Annotated, Any

from loguru import logger
from pydantic import AfterValidator, BaseModel, Field, model_validator

# =============================================================================
# CONSTANTS
# =============================================================================

MIN_EASE_FACTOR = 1.3
MIN_RATING = 1
MAX_RATING = 5
DEFAULT_RATING = 3
PASSING_RATING = 3  # below this a review is a lapse


# =============================================================================
# TIMESTAMPS
# =============================================================================


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat a naive datetime as UTC; aware values pass through."""
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def resolve_now(now: datetime | None = None) -> datetime:
    """Reference time for a calculation: now as UTC-aware, or the current time."""
    return ensure_utc(now) if now else utc_now()


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a stored timestamp.

    Accepts datetimes and ISO-8601 strings. Naive values are taken as UTC.

    Returns:
        Aware datetime, or None when the value is missing or unparseable
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None

    return ensure_utc(parsed)


# Timestamps read back from JSON may be naive; they are always stored as UTC.
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for positive values (1.5 -> 2, 2.5 -> 3)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


# =============================================================================
# SETTINGS
# =============================================================================


class SpacedRepetitionSettings(BaseModel):
    """Interval tuning for review scheduling."""

    base_interval: int = Field(default=1, ge=1, description="Starting interval in days")
    ease_factor: float = Field(default=2.5, ge=MIN_EASE_FACTOR, description="Default ease factor")
    min_interval: int = Field(default=1, ge=1, description="Shortest interval in days")
    max_interval: int = Field(default=365, ge=1, description="Longest interval in days")

    @model_validator(mode="after")
    def _check_bounds(self) -> SpacedRepetitionSettings:
        if self.max_interval < self.min_interval:
            raise ValueError("max_interval must be >= min_interval")
        return self


class InterleavingSettings(BaseModel):
    """Topic mixing controls for practice sessions."""

    enabled: bool = True
    context_switch_frequency: int = Field(default=3, ge=1, le=5)
    min_topics_to_interleave: int = Field(default=2, ge=1)
    shuffle_intensity: int = Field(default=3, ge=1, le=5)


# =============================================================================
# SPACED REPETITION
# =============================================================================


class ReviewRecord(BaseModel):
    """Scheduling state of one item. Created on its first rating."""

    rating: int = Field(ge=MIN_RATING, le=MAX_RATING)
    last_reviewed_at: UtcDatetime
    repetition_count: int = Field(default=0, ge=0)
    ease_factor: float = Field(default=2.5, ge=MIN_EASE_FACTOR)
    interval_days: int = Field(default=0, ge=0)
    next_review_at: UtcDatetime


@dataclass
class ReviewOutcome:
    """Result of scheduling one rating."""

    next_review_date: datetime
    new_interval: int
    new_ease_factor: float
    repetition_count: int


# =============================================================================
# INTERLEAVING
# =============================================================================


@dataclass
class TopicGroup:
    """Items of one topic offered to a practice session."""

    topic_id: str
    items: list[Any] = field(default_factory=list)
    weight: float = 1.0

    def __post_init__(self) -> None:
        if isinstance(self.weight, bool) or not isinstance(self.weight, (int, float)) or not self.weight > 0:
            logger.warning(f"Topic '{self.topic_id}' has invalid weight {self.weight!r}, using 1.0")
            self.weight = 1.0


@dataclass
class InterleavedSequence:
    """Ordered practice items plus how evenly they mix topics."""

    sequence: list[Any] = field(default_factory=list)
    topic_distribution: dict[str, int] = field(default_factory=dict)
    context_switches: int = 0
    effectiveness: float = 0.0


# =============================================================================
# PRACTICE SESSIONS
# =============================================================================


class SessionResult(BaseModel):
    """One answered item within a practice session."""

    topic: str
    item: Any = None
    correct: bool
    response_time_ms: float = Field(ge=0)
    recorded_at: UtcDatetime


class PerformanceMetric(BaseModel):
    """Per-topic accuracy and latency for a session."""

    topic: str
    correct_count: int
    total_count: int
    accuracy: float
    avg_response_time_ms: float


class PracticeSession(BaseModel):
    """A single interleaved practice sitting."""

    id: str
    started_at: UtcDatetime
    ended_at: UtcDatetime | None = None
    topic_groups: list[TopicGroup] = Field(default_factory=list)
    results: list[SessionResult] = Field(default_factory=list)
    metrics: list[PerformanceMetric] | None = None
    recommendations: list[str] | None = None

    @property
    def duration_ms(self) -> float | None:
        """Wall-clock length in milliseconds, None while still active."""
        if self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds() * 1000
