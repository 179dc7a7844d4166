"""Unit tests for pipeline orchestration and interactive session state."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from duetcast.config import DuetcastConfig
from duetcast.errors import MissingCredentialError, MissingInputError, UpstreamFailureError
from duetcast.llm.http_client import ProviderHTTPError
from duetcast.models.datatypes import Speaker
from duetcast.pipeline.orchestrator import PodcastPipeline
from duetcast.pipeline.session import PodcastSession
from duetcast.playback.controller import PlaybackController, PlaybackStatus
from duetcast.telemetry.logger import RunLogger
from duetcast.tts.voices import VoiceProfile


class _FakeRequester:
    """Transcript requester test double returning a fixed transcript."""

    provider_id = "gemini"

    def __init__(self, transcript: str = "Host: Welcome\nGuest: Thanks\nHost: Bye") -> None:
        """Initialize with the transcript to return."""

        self.transcript = transcript
        self.topics: list[str] = []

    def request_transcript(self, topic: str) -> str:
        """Record the topic and return the canned transcript."""

        self.topics.append(topic)
        return self.transcript


class _FakeSpeech:
    """Speech synthesizer test double with an optional failing call."""

    provider_id = "openai"
    audio_format = "mp3"

    def __init__(self, fail_on_call: int | None = None) -> None:
        """Initialize call log and optional failing call number."""

        self.calls: list[tuple[str, str]] = []
        self.fail_on_call = fail_on_call

    def synthesize(self, text: str, voice: VoiceProfile) -> bytes:
        """Record the request and return deterministic audio bytes."""

        self.calls.append((text, voice.provider_voice_id))
        if self.fail_on_call == len(self.calls):
            raise ProviderHTTPError("OpenAI request failed (HTTP 500).", status_code=500)
        return b"ID3"


def _config(tmp_path: Path, **overrides: object) -> DuetcastConfig:
    values: dict[str, object] = {
        "data_dir": tmp_path / "data",
        "gemini_api_key": "gem-key",
        "openai_api_key": "oa-key",
        "request_interval_seconds": 0.0,
    }
    values.update(overrides)
    return DuetcastConfig(**values)  # type: ignore[arg-type]


def _pipeline(
    tmp_path: Path,
    requester: _FakeRequester | None = None,
    speech: _FakeSpeech | None = None,
    **overrides: object,
) -> PodcastPipeline:
    return PodcastPipeline(
        _config(tmp_path, **overrides),
        transcript_requester=requester or _FakeRequester(),
        speech_synthesizer=speech or _FakeSpeech(),
    )


def test_pipeline_run_produces_ordered_segments_and_history(tmp_path: Path) -> None:
    """A successful run returns segments in transcript order and stores them."""

    requester = _FakeRequester()
    speech = _FakeSpeech()
    pipeline = _pipeline(tmp_path, requester, speech)

    run = pipeline.run("  Jazz history  ")

    assert requester.topics == ["Jazz history"]
    assert run.topic == "Jazz history"
    assert [segment.speaker for segment in run.segments] == [Speaker.HOST, Speaker.GUEST, Speaker.HOST]
    assert [voice for _, voice in speech.calls] == ["alloy", "nova", "alloy"]
    assert all(segment.audio_ref.is_file() for segment in run.segments)
    stored = pipeline.history.list()
    assert [entry.id for entry in stored] == [run.history_id]
    assert stored[0].segments == run.segments


def test_pipeline_emits_stage_progress_and_phase_logs(tmp_path: Path) -> None:
    """Stages report progress in order and log start/complete phase lines."""

    progress: list[tuple[str, int, int]] = []
    sink = io.StringIO()
    pipeline = PodcastPipeline(
        _config(tmp_path),
        transcript_requester=_FakeRequester(),
        speech_synthesizer=_FakeSpeech(),
        run_logger=RunLogger(sink=sink),
        stage_progress_callback=lambda name, index, total: progress.append((name, index, total)),
    )

    pipeline.run("Jazz")

    assert progress == [
        ("transcript", 1, 4),
        ("segment", 2, 4),
        ("synthesize", 3, 4),
        ("history", 4, 4),
    ]
    log_text = sink.getvalue()
    assert "[phase] level=INFO stage=transcript event=start" in log_text
    assert "[phase] level=INFO stage=segment event=complete chunks=3" in log_text
    assert "[phase] level=INFO stage=history event=complete" in log_text


def test_missing_credential_fails_before_any_request(tmp_path: Path) -> None:
    """A missing speech key aborts before the transcript request is sent."""

    requester = _FakeRequester()
    pipeline = _pipeline(tmp_path, requester, openai_api_key=None)

    with pytest.raises(MissingCredentialError) as exc_info:
        pipeline.run("Jazz")

    assert exc_info.value.provider_id == "openai"
    assert exc_info.value.stage == "credentials"
    assert requester.topics == []


def test_empty_topic_is_rejected(tmp_path: Path) -> None:
    """Whitespace-only topics fail with an input-stage error."""

    requester = _FakeRequester()
    pipeline = _pipeline(tmp_path, requester)

    with pytest.raises(MissingInputError):
        pipeline.run("   ")

    assert requester.topics == []


def test_unlabeled_transcript_yields_zero_segments(tmp_path: Path) -> None:
    """Transcripts without Host/Guest labels complete with nothing to play."""

    speech = _FakeSpeech()
    pipeline = _pipeline(tmp_path, _FakeRequester("Just some prose."), speech)

    run = pipeline.run("Jazz")

    assert run.segments == ()
    assert speech.calls == []
    assert pipeline.history.load(run.history_id or "") is not None


def test_synthesis_failure_leaves_history_untouched(tmp_path: Path) -> None:
    """A failed speech request produces no history entry and no audio files."""

    pipeline = _pipeline(tmp_path, speech=_FakeSpeech(fail_on_call=2))

    with pytest.raises(UpstreamFailureError) as exc_info:
        pipeline.run("Jazz")

    assert exc_info.value.stage == "synthesize"
    assert exc_info.value.status_code == 500
    assert pipeline.history.list() == []
    assert not any(path.is_file() for path in (tmp_path / "data" / "audio").rglob("*"))


def test_history_failure_releases_synthesized_audio(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Audio written by a run is deleted when the history entry cannot be saved."""

    pipeline = _pipeline(tmp_path)

    def _failing_save(*_args: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(pipeline.history, "save", _failing_save)

    with pytest.raises(OSError, match="disk full"):
        pipeline.run("Jazz")

    assert not any(path.is_file() for path in (tmp_path / "data" / "audio").rglob("*"))


def test_session_generate_installs_segments_without_autoplay(tmp_path: Path, fake_sink) -> None:  # type: ignore[no-untyped-def]
    """Generating replaces the session output and prepares the first segment only."""

    session = PodcastSession(_pipeline(tmp_path), PlaybackController(fake_sink))

    run = session.generate("Jazz")

    assert session.topic == "Jazz"
    assert session.segments == run.segments
    assert session.controller.status is PlaybackStatus.LOADING
    assert fake_sink.attached == run.segments[0].audio_ref
    assert fake_sink.count("play") == 0


def test_session_failure_keeps_previous_output(tmp_path: Path, fake_sink) -> None:  # type: ignore[no-untyped-def]
    """A failed run leaves the current output and playback state untouched."""

    speech = _FakeSpeech()
    session = PodcastSession(_pipeline(tmp_path, speech=speech), PlaybackController(fake_sink))
    first = session.generate("Jazz")
    speech.fail_on_call = len(speech.calls) + 1

    with pytest.raises(UpstreamFailureError):
        session.generate("Blues")

    assert session.topic == "Jazz"
    assert session.segments == first.segments
    assert fake_sink.attached == first.segments[0].audio_ref


def test_session_load_from_history_replaces_output(tmp_path: Path, fake_sink) -> None:  # type: ignore[no-untyped-def]
    """Reloading a stored podcast resets playback to its first segment."""

    session = PodcastSession(_pipeline(tmp_path), PlaybackController(fake_sink))
    first = session.generate("Jazz")
    second = session.generate("Blues")
    session.controller.play()

    loaded = session.load_from_history(first.history_id or "")

    assert loaded is not None
    assert session.topic == "Jazz"
    assert session.controller.current_index == 0
    assert session.controller.status is PlaybackStatus.LOADING
    assert all(segment.audio_ref.is_file() for segment in second.segments)
    assert session.load_from_history("unknown") is None
    assert session.topic == "Jazz"
