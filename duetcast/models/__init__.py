"""Shared datatypes for transcript, audio, and history records."""

from .datatypes import (
    SPEED_OPTIONS,
    Chunk,
    LineLabel,
    PodcastRun,
    Segment,
    Speaker,
    StoredPodcast,
)

__all__ = [
    "SPEED_OPTIONS",
    "Chunk",
    "LineLabel",
    "PodcastRun",
    "Segment",
    "Speaker",
    "StoredPodcast",
]
