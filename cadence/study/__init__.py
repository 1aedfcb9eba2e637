"""
Study Scheduling Module.

Provides the algorithms behind review planning and practice sessions:
- Spaced repetition scheduling (ReviewScheduler)
- Due-set selection and review prioritisation
- Interleaved topic sequencing (InterleavingEngine)
- Session performance analysis and recommendations
- Session and review state services (SessionManager, ReviewService)
"""

from cadence.study.due import count_due_items, is_term_due_for_review, select_due_items
from cadence.study.interleaver import InterleavingEngine, generate_interleaved_sequence
from cadence.study.models import (
    InterleavedSequence,
    InterleavingSettings,
    PerformanceMetric,
    PracticeSession,
    ReviewOutcome,
    ReviewRecord,
    SessionResult,
    SpacedRepetitionSettings,
    TopicGroup,
)
from cadence.study.performance import analyze_interleaving_performance
from cadence.study.prioritizer import get_recommended_session_size, sort_terms_by_priority
from cadence.study.recommendations import generate_interleaving_recommendations
from cadence.study.review_service import ReviewService
from cadence.study.scheduler import ReviewScheduler, calculate_next_review
from cadence.study.session_manager import SessionManager, SessionStatistics
from cadence.study.statistics import SpacedRepetitionStats, get_spaced_repetition_stats

__all__ = [
    "ReviewScheduler",
    "calculate_next_review",
    "is_term_due_for_review",
    "select_due_items",
    "count_due_items",
    "sort_terms_by_priority",
    "get_recommended_session_size",
    "InterleavingEngine",
    "generate_interleaved_sequence",
    "analyze_interleaving_performance",
    "generate_interleaving_recommendations",
    "SessionManager",
    "SessionStatistics",
    "ReviewService",
    "SpacedRepetitionStats",
    "get_spaced_repetition_stats",
    "InterleavedSequence",
    "InterleavingSettings",
    "PerformanceMetric",
    "PracticeSession",
    "ReviewOutcome",
    "ReviewRecord",
    "SessionResult",
    "SpacedRepetitionSettings",
    "TopicGroup",
]
