"""Sequential playback state machine over one shared audio sink.

Responsibilities:
- Track the installed segment list, current index, speed, and status.
- Suppress autoplay for the first segment of every newly installed list.
- Auto-advance on "ended" and keep the chosen speed across segments.
- Serialize user actions and sink events through one re-entrant lock.
- Ignore sink events tagged with a superseded attachment token.

Transitions:
    install_segments  -> Loading (index 0 attached, not started) or Idle if empty
    on_ready          Loading -> Ready (first segment waits for `play()`)
    play              Loading/Ready/Paused/Ended -> Playing
    pause             Playing -> Paused
    on_ended          Playing -> Playing (next index) or Ended
    skip              any non-Idle -> Playing (next index), no-op at last index
    on_error          any -> Paused, failure recorded for the current index
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import threading
from typing import Sequence

from loguru import logger

from ..errors import PlaybackFailureError
from ..models.datatypes import SPEED_OPTIONS, Segment
from .sink import AudioSink, AudioSinkError


class PlaybackStatus(str, Enum):
    """Playback lifecycle states."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"


@dataclass(frozen=True, slots=True)
class PlaybackState:
    """Snapshot of the controller state."""

    current_index: int
    speed: float
    status: PlaybackStatus
    segment_count: int


class PlaybackController:
    """Drive one audio sink through an ordered segment list."""

    def __init__(self, sink: AudioSink, speed: float = 1.0) -> None:
        self._validate_speed(speed)
        self._sink = sink
        self._lock = threading.RLock()
        self._segments: tuple[Segment, ...] = ()
        self._index = 0
        self._speed = speed
        self._status = PlaybackStatus.IDLE
        self._attached_index: int | None = None
        self._attachment = 0
        self._failure: PlaybackFailureError | None = None
        sink.set_listener(self)

    @property
    def state(self) -> PlaybackState:
        with self._lock:
            return PlaybackState(
                current_index=self._index,
                speed=self._speed,
                status=self._status,
                segment_count=len(self._segments),
            )

    @property
    def status(self) -> PlaybackStatus:
        with self._lock:
            return self._status

    @property
    def current_index(self) -> int:
        with self._lock:
            return self._index

    @property
    def speed(self) -> float:
        with self._lock:
            return self._speed

    @property
    def segments(self) -> tuple[Segment, ...]:
        with self._lock:
            return self._segments

    @property
    def current_segment(self) -> Segment | None:
        with self._lock:
            if not self._segments:
                return None
            return self._segments[self._index]

    @property
    def last_failure(self) -> PlaybackFailureError | None:
        """Most recent playback failure, cleared by the next successful start."""

        with self._lock:
            return self._failure

    def reset(self) -> None:
        """Detach the sink and return to Idle with an empty segment list."""

        with self._lock:
            self._sink.detach()
            self._segments = ()
            self._index = 0
            self._attached_index = None
            self._attachment += 1
            self._failure = None
            self._set_status(PlaybackStatus.IDLE)

    def install_segments(self, segments: Sequence[Segment]) -> None:
        """Replace the segment list and prepare index 0 without starting it."""

        with self._lock:
            self.reset()
            if not segments:
                return
            self._segments = tuple(segments)
            self._set_status(PlaybackStatus.LOADING)
            self._attach(0)

    def on_ready(self, attachment: int | None = None) -> None:
        """Handle the sink reporting the attached segment as playable."""

        with self._lock:
            if self._is_stale(attachment, "ready"):
                return
            if self._status is not PlaybackStatus.LOADING or self._index != 0:
                return
            self._set_status(PlaybackStatus.READY)

    def play(self) -> None:
        """Start or resume the current segment on an explicit user action.

        Raises:
            PlaybackFailureError: When the sink cannot start the segment.
        """

        with self._lock:
            if self._status in (PlaybackStatus.IDLE, PlaybackStatus.PLAYING):
                return
            if self._attached_index != self._index:
                self._attach(self._index)
            self._start()

    def pause(self) -> None:
        """Pause the current segment; `play()` resumes it."""

        with self._lock:
            if self._status is not PlaybackStatus.PLAYING:
                return
            self._sink.pause()
            self._set_status(PlaybackStatus.PAUSED)

    def skip(self) -> None:
        """Advance to the next segment and autoplay it; no-op at the last index."""

        with self._lock:
            if self._status is PlaybackStatus.IDLE:
                return
            if self._index + 1 >= len(self._segments):
                return
            self._advance()

    def set_speed(self, speed: float) -> None:
        """Store a playback multiplier and apply it to the sink immediately.

        Raises:
            PlaybackFailureError: When the sink cannot continue at the new rate.
        """

        self._validate_speed(speed)
        with self._lock:
            self._speed = speed
            logger.info("[playback] speed={}", speed)
            try:
                self._sink.set_playback_rate(speed)
            except AudioSinkError as exc:
                failure = PlaybackFailureError(self._index, str(exc))
                self._record_failure(failure)
                raise failure from exc

    def on_ended(self, attachment: int | None = None) -> None:
        """Handle the sink finishing the current segment."""

        with self._lock:
            if self._is_stale(attachment, "ended"):
                return
            if self._status is not PlaybackStatus.PLAYING:
                return
            if self._index + 1 >= len(self._segments):
                self._set_status(PlaybackStatus.ENDED)
                return
            try:
                self._advance()
            except PlaybackFailureError:
                # Recorded in `last_failure`; sink events have no caller to report to.
                return

    def on_error(self, detail: str, attachment: int | None = None) -> PlaybackFailureError | None:
        """Record a sink failure for the current index without auto-advancing.

        Returns `None` when the event belongs to a superseded attachment.
        """

        with self._lock:
            if self._is_stale(attachment, "error"):
                return None
            failure = PlaybackFailureError(self._index, detail)
            self._record_failure(failure)
            return failure

    def _advance(self) -> None:
        self._index += 1
        self._attach(self._index)
        self._start()

    def _attach(self, index: int) -> None:
        self._attachment += 1
        self._sink.attach(self._segments[index].audio_ref, self._attachment)
        self._sink.set_playback_rate(self._speed)
        self._attached_index = index

    def _start(self) -> None:
        try:
            self._sink.play()
        except AudioSinkError as exc:
            failure = PlaybackFailureError(self._index, str(exc))
            self._record_failure(failure)
            raise failure from exc
        self._failure = None
        self._set_status(PlaybackStatus.PLAYING)

    def _is_stale(self, attachment: int | None, event: str) -> bool:
        if attachment is None or attachment == self._attachment:
            return False
        logger.debug("[playback] dropped stale {} event attachment={}", event, attachment)
        return True

    def _record_failure(self, failure: PlaybackFailureError) -> None:
        self._failure = failure
        if self._status is not PlaybackStatus.IDLE:
            self._set_status(PlaybackStatus.PAUSED)
        logger.error("[playback] failure index={} detail={}", failure.segment_index, failure.detail)

    def _set_status(self, status: PlaybackStatus) -> None:
        self._status = status
        logger.info(
            "[playback] status={} index={}/{}",
            status.value,
            self._index + 1 if self._segments else 0,
            len(self._segments),
        )

    @staticmethod
    def _validate_speed(speed: float) -> None:
        if speed not in SPEED_OPTIONS:
            supported = ", ".join(f"{option:g}" for option in SPEED_OPTIONS)
            raise ValueError(f"Unsupported playback speed `{speed}`; supported: {supported}.")
