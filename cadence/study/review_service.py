"""
Review Service - spaced repetition over stored items.

Keeps one ReviewRecord per item id in the key-value store and answers the
questions the rest of the app asks:
- rate_item: schedule the next review after a rating
- due_count / due_items: what needs review now (feeds reminders)
- build_review_queue: the prioritised, size-capped queue for one sitting
- get_stats: progress summary
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Callable, Optional

from loguru import logger
from pydantic import ValidationError

from cadence.config import Settings, get_settings
from cadence.storage import KeyValueStore, read_json, read_model, write_json, write_model
from cadence.study.due import is_item_due
from cadence.study.events import Listener, ListenerRegistry
from cadence.study.models import ReviewRecord, SpacedRepetitionSettings, resolve_now, utc_now
from cadence.study.prioritizer import get_recommended_session_size, sort_terms_by_priority
from cadence.study.scheduler import ReviewScheduler
from cadence.study.statistics import SpacedRepetitionStats, get_spaced_repetition_stats

SETTINGS_KEY = "spaced_repetition.settings"
RECORDS_KEY = "spaced_repetition.records"


class ReviewService:
    """
    Spaced repetition facade.

    Args:
        store: Key-value store for settings and review records
        config: Process settings or None for get_settings()
        clock: Returns the current time; defaults to UTC now
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.config = config or get_settings()
        self.clock = clock or utc_now
        self.listeners = ListenerRegistry(isolate=self.config.isolate_listeners)

        self._lock = threading.RLock()
        self._settings = read_model(store, SETTINGS_KEY, SpacedRepetitionSettings) or SpacedRepetitionSettings()
        self._records = self._load_records()

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        """Register a change listener; returns its disposer."""
        return self.listeners.subscribe(callback)

    # ========================================
    # Settings
    # ========================================

    def get_settings(self) -> SpacedRepetitionSettings:
        return self._settings.model_copy()

    def update_settings(self, **changes: Any) -> SpacedRepetitionSettings:
        """
        Merge changes into the interval settings, persist and notify.

        Raises:
            pydantic.ValidationError: if a value is out of range
        """
        with self._lock:
            merged = SpacedRepetitionSettings.model_validate({**self._settings.model_dump(), **changes})
            self._settings = merged
            write_model(self.store, SETTINGS_KEY, merged)

        logger.info(f"Spaced repetition settings updated: {changes}")
        self.listeners.notify()
        return merged.model_copy()

    def reset_settings(self) -> SpacedRepetitionSettings:
        with self._lock:
            self._settings = SpacedRepetitionSettings()
            write_model(self.store, SETTINGS_KEY, self._settings)

        logger.info("Spaced repetition settings reset to defaults")
        self.listeners.notify()
        return self._settings.model_copy()

    # ========================================
    # Records
    # ========================================

    def rate_item(self, item_id: str, rating: Any, now: Optional[datetime] = None) -> ReviewRecord:
        """
        Record a rating for an item and schedule its next review.

        Args:
            item_id: Identifier of the learned item
            rating: Self-rating 1-5 (coerced to 3 when invalid)
            now: Review time, defaults to the service clock

        Returns:
            The updated (or newly created) ReviewRecord
        """
        now = resolve_now(now or self.clock())

        with self._lock:
            scheduler = ReviewScheduler(self._settings)
            record = scheduler.apply_review(self._records.get(item_id), rating, now=now)
            records = {**self._records, item_id: record}
            self._save_records(records)
            self._records = records

        logger.debug(
            f"Rated '{item_id}' {record.rating}: interval {record.interval_days}d, "
            f"ease {record.ease_factor}, next {record.next_review_at.isoformat()}"
        )
        self.listeners.notify()
        return record.model_copy()

    def get_record(self, item_id: str) -> Optional[ReviewRecord]:
        record = self._records.get(item_id)
        return record.model_copy() if record else None

    def remove_record(self, item_id: str) -> bool:
        """Drop an item's record when the item itself is deleted."""
        with self._lock:
            if item_id not in self._records:
                return False
            records = {k: r for k, r in self._records.items() if k != item_id}
            self._save_records(records)
            self._records = records

        self.listeners.notify()
        return True

    def records(self) -> dict[str, ReviewRecord]:
        with self._lock:
            return {item_id: r.model_copy() for item_id, r in self._records.items()}

    # ========================================
    # Due Items
    # ========================================

    def due_items(self, now: Optional[datetime] = None) -> dict[str, ReviewRecord]:
        now = resolve_now(now or self.clock())
        return {item_id: r for item_id, r in self.records().items() if is_item_due(r, now)}

    def due_count(self, now: Optional[datetime] = None) -> int:
        """Number of items due now; consumed by reminder scheduling."""
        return len(self.due_items(now))

    def build_review_queue(self, now: Optional[datetime] = None) -> list[str]:
        """
        Item ids to review in one sitting.

        Due items are ordered by priority and truncated to the recommended
        session size.
        """
        due = self.due_items(now)
        ordered = sort_terms_by_priority(
            due.items(),
            undated_first=self.config.undated_first,
            key=lambda entry: entry[1],
        )
        size = get_recommended_session_size(len(ordered))
        return [item_id for item_id, _ in ordered[:size]]

    def get_stats(self, now: Optional[datetime] = None) -> SpacedRepetitionStats:
        now = resolve_now(now or self.clock())
        return get_spaced_repetition_stats(self.records().values(), now=now)

    # ========================================
    # Persistence
    # ========================================

    def _load_records(self) -> dict[str, ReviewRecord]:
        data = read_json(self.store, RECORDS_KEY)
        if not isinstance(data, dict):
            if data is not None:
                logger.warning(f"Ignoring review records of type {type(data).__name__}")
            return {}

        records = {}
        for item_id, entry in data.items():
            try:
                records[item_id] = ReviewRecord.model_validate(entry)
            except ValidationError:
                logger.warning(f"Skipping malformed review record for '{item_id}'")
        return records

    def _save_records(self, records: dict[str, ReviewRecord]) -> None:
        write_json(
            self.store,
            RECORDS_KEY,
            {item_id: r.model_dump(mode="json") for item_id, r in records.items()},
        )
