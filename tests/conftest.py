"""Shared pytest fixtures for the Duetcast test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterator

from loguru import logger
import pytest

from duetcast.models.datatypes import Segment, Speaker
from duetcast.playback.sink import AudioSinkError


class FakeKeyringModule:
    """In-memory keyring stub so tests never touch the OS credential store."""

    def __init__(self) -> None:
        self._storage: dict[tuple[str, str], str] = {}

    def get_password(self, service_name: str, account_name: str) -> str | None:
        return self._storage.get((service_name, account_name))

    def set_password(self, service_name: str, account_name: str, value: str) -> None:
        self._storage[(service_name, account_name)] = value

    def delete_password(self, service_name: str, account_name: str) -> None:
        self._storage.pop((service_name, account_name), None)


class FakeSink:
    """Audio sink test double that records every call and never emits events itself."""

    def __init__(self) -> None:
        self.listener: object | None = None
        self.attached: Path | None = None
        self.attachment = 0
        self.rate: float | None = None
        self.playing = False
        self.play_error: str | None = None
        self.rate_error: str | None = None
        self.calls: list[tuple[object, ...]] = []

    def set_listener(self, listener: object) -> None:
        self.listener = listener

    def attach(self, resource: Path, attachment: int = 0) -> None:
        self.calls.append(("attach", resource))
        self.attached = resource
        self.attachment = attachment
        self.playing = False

    def detach(self) -> None:
        self.calls.append(("detach",))
        self.attached = None
        self.playing = False

    def play(self) -> None:
        self.calls.append(("play", self.attached))
        if self.play_error is not None:
            raise AudioSinkError(self.play_error)
        self.playing = True

    def pause(self) -> None:
        self.calls.append(("pause",))
        self.playing = False

    def set_playback_rate(self, rate: float) -> None:
        self.calls.append(("rate", rate))
        if self.rate_error is not None:
            raise AudioSinkError(self.rate_error)
        self.rate = rate

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture(autouse=True)
def _silence_loguru() -> Iterator[None]:
    """Drop loguru handlers so log output never leaks into captured streams."""

    logger.remove()
    yield
    logger.remove()


@pytest.fixture(autouse=True)
def fake_keyring(monkeypatch: pytest.MonkeyPatch) -> FakeKeyringModule:
    """Replace the keyring backend used by credential storage."""

    fake = FakeKeyringModule()
    monkeypatch.setattr("duetcast.credentials.keyring", fake)
    return fake


@pytest.fixture
def fake_sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def make_segments(tmp_path: Path) -> Callable[[int], list[Segment]]:
    """Build `count` alternating host/guest segments backed by real files."""

    def _make(count: int, prefix: str = "seg") -> list[Segment]:
        segments: list[Segment] = []
        for index in range(count):
            path = tmp_path / "audio" / prefix / f"{index:03d}.mp3"
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"ID3")
            speaker = Speaker.HOST if index % 2 == 0 else Speaker.GUEST
            segments.append(Segment(audio_ref=path, speaker=speaker, text=f" line {index} "))
        return segments

    return _make
