"""Key-value persistence used for history state.

Responsibilities:
- Define the injected get/set/remove interface used instead of ambient storage.
- Provide a JSON-file implementation and an in-memory implementation.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Protocol for JSON-compatible key-value persistence."""

    def get(self, key: str) -> Any | None:
        """Return the stored value for `key`, or `None` when missing."""

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-compatible value under `key`."""

    def remove(self, key: str) -> None:
        """Remove `key` if present."""


class InMemoryKeyValueStore:
    """Process-local key-value store."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> Any | None:
        raw = self._values.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        # Serialized so callers never share mutable state with the store.
        self._values[key] = json.dumps(value)

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileKeyValueStore:
    """Key-value store persisted as one JSON object on disk."""

    def __init__(self, path: Path) -> None:
        """Initialize the store with its backing JSON file path."""

        self.path = path

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        raw_text = self.path.read_text(encoding="utf-8")
        if not raw_text.strip():
            return {}
        payload = json.loads(raw_text)
        if not isinstance(payload, dict):
            raise ValueError(f"Key-value file `{self.path}` must contain a JSON object.")
        return payload

    def _write_all(self, payload: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_name(f"{self.path.name}.tmp")
        temp_path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True),
            encoding="utf-8",
        )
        temp_path.replace(self.path)

    def get(self, key: str) -> Any | None:
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        payload = self._read_all()
        payload[key] = value
        self._write_all(payload)

    def remove(self, key: str) -> None:
        payload = self._read_all()
        if key in payload:
            del payload[key]
            self._write_all(payload)
