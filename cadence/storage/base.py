"""
Store protocol and fail-open JSON helpers.

Reads never raise on malformed content: unparseable JSON or a payload that no
longer matches its model is logged and reported as absent (None).
"""

from __future__ import annotations

import json
from typing import Any, Protocol, TypeVar, runtime_checkable

from loguru import logger
from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


@runtime_checkable
class KeyValueStore(Protocol):
    """String-keyed store holding JSON text."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


def read_json(store: KeyValueStore, key: str) -> Any | None:
    """Decode the JSON value under key, or None if missing or unparseable."""
    raw = store.get(key)
    if raw is None:
        return None

    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning(f"Ignoring malformed JSON under '{key}': {e}")
        return None


def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    """Encode value as JSON and store it under key."""
    store.set(key, json.dumps(value, default=str))


def read_model(store: KeyValueStore, key: str, model: type[ModelT]) -> ModelT | None:
    """Validate the stored JSON under key as model, or None if absent or invalid."""
    data = read_json(store, key)
    if data is None:
        return None

    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid {model.__name__} under '{key}': {e.error_count()} error(s)")
        return None


def write_model(store: KeyValueStore, key: str, value: BaseModel) -> None:
    """Store a pydantic model as JSON under key."""
    store.set(key, value.model_dump_json())
