"""Unit tests for the sequential playback state machine."""

from __future__ import annotations

import pytest

from duetcast.errors import PlaybackFailureError
from duetcast.playback.controller import PlaybackController, PlaybackStatus


def test_install_prepares_first_segment_without_starting(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """Installing segments should attach the first one without playing it."""

    segments = make_segments(3)
    controller = PlaybackController(fake_sink)

    controller.install_segments(segments)

    assert controller.status is PlaybackStatus.LOADING
    assert controller.current_index == 0
    assert fake_sink.attached == segments[0].audio_ref
    assert fake_sink.count("play") == 0
    assert fake_sink.listener is controller


def test_first_segment_waits_for_explicit_play(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """Ready events never start the first segment; only `play()` does."""

    controller = PlaybackController(fake_sink)
    controller.install_segments(make_segments(2))

    controller.on_ready()
    controller.on_ready()

    assert controller.status is PlaybackStatus.READY
    assert fake_sink.count("play") == 0

    controller.play()

    assert controller.status is PlaybackStatus.PLAYING
    assert fake_sink.count("play") == 1


def test_ended_event_autoplays_next_segment(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """Finishing a segment should attach and start the next one."""

    segments = make_segments(3)
    controller = PlaybackController(fake_sink)
    controller.install_segments(segments)
    controller.on_ready()
    controller.play()

    controller.on_ended()

    assert controller.current_index == 1
    assert controller.status is PlaybackStatus.PLAYING
    assert fake_sink.attached == segments[1].audio_ref
    assert fake_sink.calls[-1] == ("play", segments[1].audio_ref)


def test_ended_on_last_segment_finishes(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """Finishing the last segment should end playback without wrapping."""

    controller = PlaybackController(fake_sink)
    controller.install_segments(make_segments(2))
    controller.play()

    controller.on_ended()
    controller.on_ended()

    assert controller.status is PlaybackStatus.ENDED
    assert controller.current_index == 1


def test_skip_at_last_index_is_noop(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """Skipping on the last segment should change nothing."""

    segments = make_segments(2)
    controller = PlaybackController(fake_sink)
    controller.install_segments(segments)
    controller.play()
    controller.skip()
    attach_count = fake_sink.count("attach")

    controller.skip()

    assert controller.current_index == 1
    assert fake_sink.count("attach") == attach_count


def test_skip_before_first_play_autoplays_next(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """Skipping from the ready state should start the second segment."""

    segments = make_segments(3)
    controller = PlaybackController(fake_sink)
    controller.install_segments(segments)
    controller.on_ready()

    controller.skip()

    assert controller.current_index == 1
    assert controller.status is PlaybackStatus.PLAYING
    assert fake_sink.calls[-1] == ("play", segments[1].audio_ref)


def test_speed_persists_across_auto_advance(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """The multiplier is re-applied to every newly attached segment."""

    controller = PlaybackController(fake_sink)
    controller.install_segments(make_segments(3))
    controller.play()
    controller.set_speed(1.5)
    fake_sink.rate = None

    controller.on_ended()

    assert fake_sink.rate == 1.5
    assert controller.speed == 1.5


def test_set_speed_applies_immediately_and_rejects_unknown(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """Speed changes apply to the sink; unsupported speeds are rejected."""

    controller = PlaybackController(fake_sink)
    controller.install_segments(make_segments(1))

    controller.set_speed(0.75)

    assert fake_sink.rate == 0.75
    with pytest.raises(ValueError, match="Unsupported playback speed"):
        controller.set_speed(3.0)
    with pytest.raises(ValueError):
        PlaybackController(fake_sink, speed=1.1)


def test_pause_and_resume_keep_attachment(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """Pause and resume should reuse the attached segment."""

    controller = PlaybackController(fake_sink)
    controller.install_segments(make_segments(2))
    controller.play()
    attach_count = fake_sink.count("attach")

    controller.pause()
    assert controller.status is PlaybackStatus.PAUSED
    controller.on_ended()
    assert controller.current_index == 0

    controller.play()

    assert controller.status is PlaybackStatus.PLAYING
    assert fake_sink.count("attach") == attach_count


def test_sink_error_halts_auto_advance(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """Sink errors should pause on the failing segment until the user plays again."""

    controller = PlaybackController(fake_sink)
    controller.install_segments(make_segments(3))
    controller.play()
    controller.on_ended()

    failure = controller.on_error("decoder error")

    assert isinstance(failure, PlaybackFailureError)
    assert failure.segment_index == 1
    assert controller.last_failure is failure
    assert controller.status is PlaybackStatus.PAUSED
    controller.on_ended()
    assert controller.current_index == 1

    controller.play()
    assert controller.status is PlaybackStatus.PLAYING
    assert controller.last_failure is None


def test_play_failure_is_raised_and_recorded(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """A sink start failure should raise and leave the controller paused."""

    controller = PlaybackController(fake_sink)
    controller.install_segments(make_segments(2))
    fake_sink.play_error = "device busy"

    with pytest.raises(PlaybackFailureError, match="segment 1: device busy"):
        controller.play()

    assert controller.status is PlaybackStatus.PAUSED
    assert controller.last_failure is not None


def test_auto_advance_failure_does_not_raise_from_event(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """Start failures during auto-advance are recorded instead of raised."""

    controller = PlaybackController(fake_sink)
    controller.install_segments(make_segments(2))
    controller.play()
    fake_sink.play_error = "device lost"

    controller.on_ended()

    assert controller.current_index == 1
    assert controller.status is PlaybackStatus.PAUSED
    assert controller.last_failure is not None
    assert controller.last_failure.segment_index == 1


def test_empty_install_is_idle_and_ignores_actions(fake_sink) -> None:  # type: ignore[no-untyped-def]
    """An empty segment list should leave every action a no-op."""

    controller = PlaybackController(fake_sink)

    controller.install_segments([])
    controller.play()
    controller.skip()
    controller.on_ended()

    assert controller.status is PlaybackStatus.IDLE
    assert controller.current_segment is None
    assert fake_sink.count("play") == 0


def test_reinstall_resets_to_first_segment(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """Installing a new list should restart from its first segment."""

    controller = PlaybackController(fake_sink)
    controller.install_segments(make_segments(3))
    controller.play()
    controller.skip()
    replacement = make_segments(2, prefix="other")

    controller.install_segments(replacement)

    assert controller.current_index == 0
    assert controller.status is PlaybackStatus.LOADING
    assert fake_sink.attached == replacement[0].audio_ref
    assert controller.state.segment_count == 2


def test_ready_is_ignored_after_playback_started(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """Late ready events should not change an active playback state."""

    controller = PlaybackController(fake_sink)
    controller.install_segments(make_segments(2))
    controller.play()

    controller.on_ready()

    assert controller.status is PlaybackStatus.PLAYING


def test_ended_event_from_superseded_segment_is_ignored(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """An ended event for a segment the user already skipped must not advance again."""

    segments = make_segments(3)
    controller = PlaybackController(fake_sink)
    controller.install_segments(segments)
    controller.play()
    first_attachment = fake_sink.attachment

    controller.skip()
    controller.on_ended(first_attachment)

    assert controller.current_index == 1
    assert controller.status is PlaybackStatus.PLAYING
    assert fake_sink.attached == segments[1].audio_ref

    controller.on_ended(fake_sink.attachment)

    assert controller.current_index == 2


def test_error_event_from_superseded_segment_is_ignored(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """Errors reported for a replaced attachment leave the current segment playing."""

    controller = PlaybackController(fake_sink)
    controller.install_segments(make_segments(2))
    controller.play()
    first_attachment = fake_sink.attachment
    controller.skip()

    assert controller.on_error("broken pipe", first_attachment) is None
    assert controller.status is PlaybackStatus.PLAYING
    assert controller.last_failure is None


def test_speed_change_failure_pauses_current_segment(fake_sink, make_segments) -> None:  # type: ignore[no-untyped-def]
    """A sink that cannot continue at the new rate should surface a playback failure."""

    controller = PlaybackController(fake_sink)
    controller.install_segments(make_segments(2))
    controller.play()
    fake_sink.rate_error = "player vanished"

    with pytest.raises(PlaybackFailureError, match="player vanished"):
        controller.set_speed(2.0)

    assert controller.status is PlaybackStatus.PAUSED
    assert controller.speed == 2.0
