"""Local persistence helpers for audio files and key-value state."""

from .kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from .storage import AudioStore

__all__ = ["AudioStore", "InMemoryKeyValueStore", "JsonFileKeyValueStore", "KeyValueStore"]
