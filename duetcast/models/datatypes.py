"""Core datatypes shared across Duetcast modules.

Responsibilities:
- Represent immutable records exchanged between pipeline stages.
- Provide explicit typing and JSON payload conversion for persisted history.

Key types:
- `Speaker`, `LineLabel`, `Chunk`, `Segment`, `PodcastRun`, and `StoredPodcast`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping


SPEED_OPTIONS: tuple[float, ...] = (0.5, 0.75, 1.0, 1.25, 1.5, 2.0)


class Speaker(str, Enum):
    """Speaker role in a two-voice conversation."""

    HOST = "host"
    GUEST = "guest"


class LineLabel(str, Enum):
    """Classification of one transcript line by its leading speaker label."""

    NO_LABEL = "no_label"
    HOST = "host"
    GUEST = "guest"

    def speaker(self) -> Speaker | None:
        """Return the speaker identified by this label, or `None` for unlabeled lines."""

        if self is LineLabel.HOST:
            return Speaker.HOST
        if self is LineLabel.GUEST:
            return Speaker.GUEST
        return None


@dataclass(frozen=True, slots=True)
class Chunk:
    """A contiguous span of transcript text attributed to one speaker.

    Attributes:
        speaker: Speaker role for the span.
        text: Span text with speaker labels removed.
    """

    speaker: Speaker
    text: str


@dataclass(frozen=True, slots=True)
class Segment:
    """The synthesized audio of one chunk.

    Attributes:
        audio_ref: Path to the playable audio file owned by the audio store.
        speaker: Speaker role copied from the source chunk.
        text: Source chunk text, kept for display during playback.
    """

    audio_ref: Path
    speaker: Speaker
    text: str

    def to_payload(self) -> dict[str, str]:
        """Serialize this segment into a JSON-compatible mapping."""

        return {
            "audio_ref": str(self.audio_ref),
            "speaker": self.speaker.value,
            "text": self.text,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Segment:
        """Build a segment from a persisted JSON mapping."""

        return cls(
            audio_ref=Path(str(payload["audio_ref"])),
            speaker=Speaker(str(payload["speaker"])),
            text=str(payload.get("text", "")),
        )


@dataclass(frozen=True, slots=True)
class PodcastRun:
    """Output of one successful transcript-to-audio pipeline run."""

    run_id: str
    topic: str
    transcript: str
    chunks: tuple[Chunk, ...]
    segments: tuple[Segment, ...]
    history_id: str | None = None


@dataclass(frozen=True, slots=True)
class StoredPodcast:
    """An immutable history entry for one completed pipeline run.

    Attributes:
        id: Unique history identifier.
        topic: User-provided topic.
        transcript: Raw transcript returned by text generation.
        segments: Ordered synthesized segments.
        created_at: Creation time in epoch seconds.
    """

    id: str
    topic: str
    transcript: str
    segments: tuple[Segment, ...]
    created_at: float

    def to_payload(self) -> dict[str, Any]:
        """Serialize this entry into a JSON-compatible mapping."""

        return {
            "id": self.id,
            "topic": self.topic,
            "transcript": self.transcript,
            "segments": [segment.to_payload() for segment in self.segments],
            "created_at": self.created_at,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> StoredPodcast:
        """Build a history entry from a persisted JSON mapping."""

        raw_segments = payload.get("segments") or []
        return cls(
            id=str(payload["id"]),
            topic=str(payload.get("topic", "")),
            transcript=str(payload.get("transcript", "")),
            segments=tuple(Segment.from_payload(item) for item in raw_segments),
            created_at=float(payload.get("created_at", 0.0)),
        )
