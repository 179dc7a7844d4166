"""Interactive podcast session state.

A session owns the current pipeline output (topic, transcript, segments) and
the playback controller that plays it. A new run or a history reload fully
replaces the current output; superseded audio not kept by history is released.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from ..models.datatypes import PodcastRun, Segment, StoredPodcast
from ..playback.controller import PlaybackController
from .orchestrator import PodcastPipeline


class PodcastSession:
    """Bind pipeline output, history reloads, and playback together."""

    def __init__(self, pipeline: PodcastPipeline, controller: PlaybackController) -> None:
        self.pipeline = pipeline
        self.controller = controller
        self.topic = ""
        self.transcript = ""
        self.segments: tuple[Segment, ...] = ()

    def generate(self, topic: str) -> PodcastRun:
        """Run the pipeline and install its segments for playback.

        On failure the current output and playback are left untouched.
        """

        run = self.pipeline.run(topic)
        self._replace(run.topic, run.transcript, run.segments)
        return run

    def load_from_history(self, podcast_id: str) -> StoredPodcast | None:
        """Replace the current output with a stored podcast; `None` if unknown."""

        podcast = self.pipeline.history.load(podcast_id)
        if podcast is None:
            return None
        self._replace(podcast.topic, podcast.transcript, podcast.segments)
        return podcast

    def _replace(self, topic: str, transcript: str, segments: Sequence[Segment]) -> None:
        superseded = self.segments
        self.controller.reset()
        self.topic = topic
        self.transcript = transcript
        self.segments = tuple(segments)
        self._release_superseded(superseded)
        self.controller.install_segments(self.segments)

    def _release_superseded(self, superseded: Sequence[Segment]) -> None:
        current = {segment.audio_ref for segment in self.segments}
        for segment in superseded:
            if segment.audio_ref in current:
                continue
            if self.pipeline.history.references(segment.audio_ref):
                continue
            logger.debug("Releasing superseded audio {}", segment.audio_ref)
            self.pipeline.audio_store.release(segment.audio_ref)
