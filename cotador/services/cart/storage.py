"""Durable cart storage.

A cart is stored as one serialized array under a key, read once when the
cart is created and rewritten wholesale on every mutation.
"""

import json
import re
from pathlib import Path
from typing import Any, Protocol

from cotador.core.logging import get_logger

logger = get_logger(__name__)


class CartStorage(Protocol):
    def load(self, key: str) -> list[dict[str, Any]]: ...

    def save(self, key: str, items: list[dict[str, Any]]) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryCartStorage:
    """Process-local storage; used in tests and when no directory is configured."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.writes = 0

    def load(self, key: str) -> list[dict[str, Any]]:
        raw = self.data.get(key)
        return _decode(key, raw) if raw is not None else []

    def save(self, key: str, items: list[dict[str, Any]]) -> None:
        self.data[key] = json.dumps(items)
        self.writes += 1

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileCartStorage:
    """One JSON file per key inside a directory."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self._directory / f"{re.sub(r'[^A-Za-z0-9_.-]', '-', key)}.json"

    def load(self, key: str) -> list[dict[str, Any]]:
        path = self._path(key)
        if not path.exists():
            return []
        return _decode(key, path.read_text(encoding="utf-8"))

    def save(self, key: str, items: list[dict[str, Any]]) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(items), encoding="utf-8")
        tmp.replace(path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def _decode(key: str, raw: str) -> list[dict[str, Any]]:
    """Parse a stored cart; anything unreadable is an empty cart."""
    try:
        items = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored cart is not valid JSON", key=key)
        return []
    if not isinstance(items, list):
        logger.warning("Stored cart is not a list", key=key)
        return []
    return [item for item in items if isinstance(item, dict)]
