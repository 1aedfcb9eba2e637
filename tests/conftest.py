"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cadence.config import Settings  # noqa: E402
from cadence.storage import MemoryStore  # noqa: E402

FIXED_NOW = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (services over a store)")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


class FakeClock:
    """Manually advanced clock for services that take a clock callable."""

    def __init__(self, start: datetime = FIXED_NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class FailingStore(MemoryStore):
    """MemoryStore whose next write to selected keys raises OSError."""

    def __init__(self):
        super().__init__()
        self.failing_keys: set[str] = set()

    def fail_next_write(self, key: str) -> None:
        self.failing_keys.add(key)

    def set(self, key: str, value: str) -> None:
        if key in self.failing_keys:
            self.failing_keys.discard(key)
            raise OSError(f"disk full writing {key}")
        super().set(key, value)


@pytest.fixture
def now():
    """Fixed reference time."""
    return FIXED_NOW


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    """Seeded random source for repeatable interleaving."""
    return random.Random(1234)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def config(tmp_path):
    """Process settings isolated from the environment and .env files."""
    return Settings(_env_file=None, storage_dir=tmp_path / "store")


@pytest.fixture
def failing_store():
    return FailingStore()
