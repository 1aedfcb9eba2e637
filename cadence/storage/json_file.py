"""
File-backed key-value store.

Each key is stored as {key}.json inside the store directory, so state survives
process restarts. Write errors propagate; unreadable files read as missing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional
from urllib.parse import quote, unquote

from loguru import logger

from cadence.config import get_settings


def encode_key(key: str) -> str:
    """
    File name stem for a key.

    Percent-quotes every character outside [A-Za-z0-9_.-] (including "/" and
    "%"), plus a leading ".", so distinct keys map to distinct files that stay
    inside the store directory.
    """
    name = quote(key, safe="")
    if name.startswith("."):
        name = "%2E" + name[1:]
    return name


def decode_key(name: str) -> str:
    return unquote(name)


class JsonFileStore:
    """
    Stores JSON text in one file per key.

    Keys are percent-quoted into file names; the directory is created on demand.
    """

    def __init__(self, store_dir: Optional[Path] = None):
        self.store_dir = Path(store_dir) if store_dir else get_settings().storage_dir
        self.store_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.store_dir / f"{encode_key(key)}.json"

    def get(self, key: str) -> str | None:
        filepath = self._path(key)
        if not filepath.exists():
            return None

        try:
            return filepath.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read '{filepath}': {e}")
            return None

    def set(self, key: str, value: str) -> None:
        filepath = self._path(key)
        tmp_path = filepath.with_suffix(".json.tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(filepath)

    def delete(self, key: str) -> None:
        filepath = self._path(key)
        if filepath.exists():
            filepath.unlink()

    def keys(self) -> list[str]:
        """List stored keys."""
        return sorted(decode_key(p.stem) for p in self.store_dir.glob("*.json"))
