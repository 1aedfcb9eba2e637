"""
Key-value persistence for cadence.

The study engine only needs string keys mapped to JSON text. Backends:
- MemoryStore: process-local, used by tests and embedded callers
- JsonFileStore: one JSON file per key, survives restarts
"""

from cadence.storage.base import KeyValueStore, read_json, read_model, write_json, write_model
from cadence.storage.json_file import JsonFileStore
from cadence.storage.memory import MemoryStore

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "read_json",
    "read_model",
    "write_json",
    "write_model",
]
