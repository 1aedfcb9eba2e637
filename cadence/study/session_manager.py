"""
Practice Session Manager.

Owns the interleaving settings, the single active practice session and the
history of finished sessions. One instance is created by the host and passed
to whatever needs it; all state is mirrored to the key-value store.

Lifecycle:
- start_session: replaces any active session (last writer wins)
- record_result: appends to the active session, ignored when none is active
- finish_session: analyses results, moves the session to history

Every mutation notifies subscribed listeners synchronously.
"""

from __future__ import annotations

import random
import threading
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from loguru import logger
from pydantic import ValidationError

from cadence.config import Settings, get_settings
from cadence.storage import KeyValueStore, read_json, read_model, write_json, write_model
from cadence.study.events import Listener, ListenerRegistry
from cadence.study.interleaver import InterleavingEngine, RandomSource
from cadence.study.models import (
    InterleavedSequence,
    InterleavingSettings,
    PracticeSession,
    SessionResult,
    TopicGroup,
    ensure_utc,
    utc_now,
)
from cadence.study.performance import analyze_interleaving_performance
from cadence.study.recommendations import generate_interleaving_recommendations

SETTINGS_KEY = "interleaving.settings"
SESSIONS_KEY = "interleaving.sessions"
CURRENT_SESSION_KEY = "interleaving.current_session"

TOP_TOPICS_LIMIT = 5


@dataclass
class SessionStatistics:
    """Aggregate figures over recent finished sessions."""

    total_sessions: int = 0
    avg_accuracy: float = 0.0
    avg_session_duration_ms: float = 0.0
    most_practiced_topics: list[tuple[str, int]] = field(default_factory=list)
    total_items_reviewed: int = 0


class SessionManager:
    """
    Interleaved practice session service.

    Args:
        store: Key-value store for settings, active session and history
        config: Process settings or None for get_settings()
        rng: Random source handed to the interleaving engine
        clock: Returns the current time; defaults to UTC now
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: Optional[Settings] = None,
        rng: Optional[RandomSource] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.config = config or get_settings()
        self.rng = rng or random.Random()
        self.clock = clock or utc_now
        self.listeners = ListenerRegistry(isolate=self.config.isolate_listeners)

        self._lock = threading.RLock()
        self._settings = read_model(store, SETTINGS_KEY, InterleavingSettings) or InterleavingSettings()
        self._current = read_model(store, CURRENT_SESSION_KEY, PracticeSession)
        self._history = self._load_history()

    # ========================================
    # Listeners
    # ========================================

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        """Register a change listener; returns its disposer."""
        return self.listeners.subscribe(callback)

    # ========================================
    # Settings
    # ========================================

    def get_settings(self) -> InterleavingSettings:
        return self._settings.model_copy()

    def update_settings(self, **changes: Any) -> InterleavingSettings:
        """
        Merge changes into the current settings, persist and notify.

        Raises:
            pydantic.ValidationError: if a value is out of range
        """
        with self._lock:
            merged = InterleavingSettings.model_validate({**self._settings.model_dump(), **changes})
            self._settings = merged
            write_model(self.store, SETTINGS_KEY, merged)

        logger.info(f"Interleaving settings updated: {changes}")
        self.listeners.notify()
        return merged.model_copy()

    def reset_settings(self) -> InterleavingSettings:
        """Restore default settings, persist and notify."""
        with self._lock:
            self._settings = InterleavingSettings()
            write_model(self.store, SETTINGS_KEY, self._settings)

        logger.info("Interleaving settings reset to defaults")
        self.listeners.notify()
        return self._settings.model_copy()

    # ========================================
    # Sequencing
    # ========================================

    def generate_sequence(self, topic_groups: list[TopicGroup]) -> InterleavedSequence:
        """Interleave topic groups using the current settings."""
        return InterleavingEngine(self._settings, self.rng).generate(topic_groups)

    # ========================================
    # Session Lifecycle
    # ========================================

    def start_session(self, topic_groups: list[TopicGroup]) -> PracticeSession:
        """Begin a new session, replacing any active one."""
        session = PracticeSession(
            id=f"session-{uuid.uuid4().hex[:12]}",
            started_at=self._now(),
            topic_groups=list(topic_groups),
        )

        with self._lock:
            if self._current is not None:
                logger.info(f"Replacing unfinished session {self._current.id}")
            self._current = session
            write_model(self.store, CURRENT_SESSION_KEY, session)

        logger.info(f"Started practice session {session.id} with {len(session.topic_groups)} topics")
        self.listeners.notify()
        return session.model_copy(deep=True)

    def get_current_session(self) -> Optional[PracticeSession]:
        with self._lock:
            return self._current.model_copy(deep=True) if self._current else None

    def record_result(
        self,
        topic: str,
        item: Any,
        correct: bool,
        response_time_ms: float,
    ) -> None:
        """Append an answer to the active session. Ignored without one."""
        with self._lock:
            if self._current is None:
                logger.debug(f"No active session, dropping result for topic '{topic}'")
                return

            session = self._current.model_copy(deep=True)
            session.results.append(
                SessionResult(
                    topic=topic,
                    item=item,
                    correct=bool(correct),
                    response_time_ms=max(0.0, float(response_time_ms)),
                    recorded_at=self._now(),
                )
            )
            write_model(self.store, CURRENT_SESSION_KEY, session)
            self._current = session

        self.listeners.notify()

    def finish_session(self) -> Optional[PracticeSession]:
        """
        Close the active session.

        Returns:
            The finished session with metrics and recommendations, or None
            if no session was active
        """
        with self._lock:
            if self._current is None:
                return None

            session = self._current.model_copy(deep=True)
            session.ended_at = self._now()
            session.metrics = analyze_interleaving_performance(session.results)
            session.recommendations = generate_interleaving_recommendations(session.metrics)

            # Persist first: a failed write leaves the session active and history untouched
            history = [session, *self._history][: self.config.history_limit]
            self._save_history(history)

            self._history = history
            self._current = None
            self.store.delete(CURRENT_SESSION_KEY)

        logger.info(
            f"Finished practice session {session.id}: {len(session.results)} results, "
            f"{len(session.metrics)} topics"
        )
        self.listeners.notify()
        return session.model_copy(deep=True)

    # ========================================
    # History & Statistics
    # ========================================

    def get_session_history(self, limit: int = 10) -> list[PracticeSession]:
        """Most recent finished sessions first."""
        with self._lock:
            return [s.model_copy(deep=True) for s in self._history[:limit]]

    def get_statistics(self, limit: Optional[int] = None) -> SessionStatistics:
        """
        Summarise the most recent finished sessions.

        Args:
            limit: Number of sessions to analyse (default: statistics_window)
        """
        if limit is None:
            limit = self.config.statistics_window
        with self._lock:
            sessions = list(self._history[:limit])

        if not sessions:
            return SessionStatistics()

        results = [r for s in sessions for r in s.results]
        total_correct = sum(1 for r in results if r.correct)
        durations = [s.duration_ms for s in sessions if s.duration_ms is not None]
        topic_counts = Counter(r.topic for r in results)

        return SessionStatistics(
            total_sessions=len(sessions),
            avg_accuracy=total_correct / len(results) if results else 0.0,
            avg_session_duration_ms=sum(durations) / len(durations) if durations else 0.0,
            most_practiced_topics=topic_counts.most_common(TOP_TOPICS_LIMIT),
            total_items_reviewed=len(results),
        )

    # ========================================
    # Persistence
    # ========================================

    def _load_history(self) -> list[PracticeSession]:
        data = read_json(self.store, SESSIONS_KEY)
        if not isinstance(data, list):
            if data is not None:
                logger.warning(f"Ignoring session history of type {type(data).__name__}")
            return []

        history = []
        for entry in data:
            try:
                history.append(PracticeSession.model_validate(entry))
            except ValidationError:
                logger.warning("Skipping malformed session in history")
        return history[: self.config.history_limit]

    def _save_history(self, history: list[PracticeSession]) -> None:
        write_json(self.store, SESSIONS_KEY, [s.model_dump(mode="json") for s in history])

    def _now(self) -> datetime:
        return ensure_utc(self.clock())
