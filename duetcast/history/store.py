"""Capped podcast history persisted in a key-value store.

Responsibilities:
- Insert completed runs at the head of one list-valued entry.
- Truncate the list to `HISTORY_CAPACITY` entries on every insert.
- Release audio files of evicted or cleared entries.

Capacity policy:
    The list holds at most 10 entries, newest first. Entries beyond the cap
    are discarded permanently on insert; nothing is archived.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
import time
import uuid

from loguru import logger

from ..io.kv_store import KeyValueStore
from ..io.storage import AudioStore
from ..models.datatypes import Segment, StoredPodcast

HISTORY_KEY = "podcast_history"
HISTORY_CAPACITY = 10


class HistoryStore:
    """Append-and-cap persistence of completed pipeline runs."""

    def __init__(
        self,
        store: KeyValueStore,
        audio_store: AudioStore | None = None,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self._store = store
        self._audio_store = audio_store
        self._clock = clock
        self._id_factory = id_factory

    def save(self, topic: str, transcript: str, segments: Sequence[Segment]) -> StoredPodcast:
        """Insert a new entry at the head and evict entries beyond the cap."""

        podcast = StoredPodcast(
            id=self._id_factory(),
            topic=topic,
            transcript=transcript,
            segments=tuple(segments),
            created_at=self._clock(),
        )
        history = [podcast, *self._read()]
        kept = history[:HISTORY_CAPACITY]
        evicted = history[HISTORY_CAPACITY:]
        self._write(kept)
        for entry in evicted:
            logger.info("Evicting podcast {} from history", entry.id)
            self._release(entry, keep=kept)
        return podcast

    def list(self) -> list[StoredPodcast]:
        """Return stored podcasts newest first."""

        return sorted(self._read(), key=lambda entry: entry.created_at, reverse=True)

    def load(self, podcast_id: str) -> StoredPodcast | None:
        """Return the stored podcast with `podcast_id`, or `None` when not found."""

        for entry in self._read():
            if entry.id == podcast_id:
                return entry
        return None

    def clear(self) -> None:
        """Remove every entry and release its audio files."""

        entries = self._read()
        self._store.remove(HISTORY_KEY)
        for entry in entries:
            self._release(entry, keep=[])

    def references(self, audio_ref: Path) -> bool:
        """Return whether any stored entry still points at `audio_ref`."""

        return any(
            segment.audio_ref == audio_ref
            for entry in self._read()
            for segment in entry.segments
        )

    def _read(self) -> list[StoredPodcast]:
        payload = self._store.get(HISTORY_KEY)
        if not payload:
            return []
        if not isinstance(payload, list):
            raise ValueError(f"History entry `{HISTORY_KEY}` must be a list.")
        return [StoredPodcast.from_payload(item) for item in payload]

    def _write(self, entries: Sequence[StoredPodcast]) -> None:
        self._store.set(HISTORY_KEY, [entry.to_payload() for entry in entries])

    def _release(self, entry: StoredPodcast, keep: Sequence[StoredPodcast]) -> None:
        if self._audio_store is None:
            return
        retained = {segment.audio_ref for other in keep for segment in other.segments}
        for segment in entry.segments:
            if segment.audio_ref not in retained:
                self._audio_store.release(segment.audio_ref)
