"""Durable key-value storage for the remembered session.

The session store only needs get/set/remove on string keys, so it takes
any object with that shape. ``JsonFileStore`` keeps the values in a small
JSON file for the console; ``MemoryStore`` is used in tests and for
sessions that should not outlive the process.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Minimal persistence capability injected into the session store."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """In-process store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._values


class JsonFileStore:
    """Store backed by a JSON file, rewritten on every change."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._values: dict[str, str] = {}
        if self.path.exists():
            self._load()

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
        self._save()

    def remove(self, key: str) -> None:
        if self._values.pop(key, None) is not None:
            self._save()

    def _save(self) -> None:
        """Write values to the JSON file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "values": self._values,
            "last_updated": datetime.now().isoformat(),
        }
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def _load(self) -> None:
        """Read values from the JSON file; a corrupt file reads as empty."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            values = data.get("values", {})
            self._values = {str(k): str(v) for k, v in values.items()}
        except (json.JSONDecodeError, FileNotFoundError, AttributeError):
            logger.warning("Could not load session store from %s", self.path)
            self._values = {}
