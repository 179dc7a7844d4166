"""Audio sink protocol and the `ffplay`-backed implementation.

Responsibilities:
- Define the single shared audio output driven by `PlaybackController`.
- Report ready/ended/error events tagged with the attachment they belong to.
- Drop events that belong to a superseded attachment or player process.
"""

from __future__ import annotations

from pathlib import Path
import signal
import subprocess
import threading
import time
from typing import Callable, Protocol

from loguru import logger

from ..runtime_tools import resolve_executable


class AudioSinkError(RuntimeError):
    """Raised when the sink cannot start or resume playback."""


class SinkListener(Protocol):
    """Receiver of sink events.

    `attachment` is the token passed to `AudioSink.attach` for the resource
    the event refers to; `None` means the current attachment.
    """

    def on_ready(self, attachment: int | None = None) -> None:
        """The attached resource can be played."""

    def on_ended(self, attachment: int | None = None) -> None:
        """The attached resource finished playing."""

    def on_error(self, detail: str, attachment: int | None = None) -> object:
        """The attached resource failed to play."""


class AudioSink(Protocol):
    """One audio output; attaching a resource supersedes the previous one."""

    def set_listener(self, listener: SinkListener) -> None:
        """Register the event receiver."""

    def attach(self, resource: Path, attachment: int = 0) -> None:
        """Stop any current playback and prepare `resource` without starting it.

        Every later event about `resource` carries `attachment`.
        """

    def detach(self) -> None:
        """Stop playback and forget the attached resource."""

    def play(self) -> None:
        """Start or resume the attached resource."""

    def pause(self) -> None:
        """Pause the attached resource."""

    def set_playback_rate(self, rate: float) -> None:
        """Set the playback speed multiplier, effective immediately."""


class FfplayAudioSink:
    """Audio sink that plays files through an `ffplay` subprocess.

    Pausing suspends the process with SIGSTOP/SIGCONT (POSIX only). The rate
    is applied with the `atempo` filter, which ffplay fixes at spawn time, so
    a rate change restarts the running process at its current position
    (`-ss`). The position is tracked from wall-clock time scaled by the rate.
    """

    def __init__(
        self,
        executable: str = "ffplay",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._executable = resolve_executable(executable)
        self._clock = clock
        self._listener: SinkListener | None = None
        self._resource: Path | None = None
        self._attachment = 0
        self._process: subprocess.Popen[bytes] | None = None
        self._paused = False
        self._rate = 1.0
        self._offset = 0.0
        self._resumed_at: float | None = None
        self._generation = 0
        self._lock = threading.Lock()

    def set_listener(self, listener: SinkListener) -> None:
        self._listener = listener

    def attach(self, resource: Path, attachment: int = 0) -> None:
        with self._lock:
            self._stop_locked()
            self._generation += 1
            self._resource = resource
            self._attachment = attachment
            self._offset = 0.0
        if self._listener is None:
            return
        if resource.is_file():
            self._listener.on_ready(attachment)
        else:
            self._listener.on_error(f"Audio file not found: {resource}", attachment)

    def detach(self) -> None:
        with self._lock:
            self._stop_locked()
            self._generation += 1
            self._resource = None
            self._offset = 0.0

    def play(self) -> None:
        with self._lock:
            if self._resource is None:
                raise AudioSinkError("No audio resource is attached.")
            if self._running_locked():
                if self._paused:
                    self._process.send_signal(signal.SIGCONT)  # type: ignore[union-attr]
                    self._paused = False
                    self._resumed_at = self._clock()
                return
            process = self._spawn_locked()
            generation, attachment = self._generation, self._attachment
        self._watch_in_background(process, generation, attachment)

    def pause(self) -> None:
        with self._lock:
            if not self._running_locked() or self._paused:
                return
            self._process.send_signal(signal.SIGSTOP)  # type: ignore[union-attr]
            self._offset = self._position_locked()
            self._resumed_at = None
            self._paused = True

    def set_playback_rate(self, rate: float) -> None:
        """Store `rate`; a running player is restarted at its current position.

        A paused player is stopped and respawns at the same position on the
        next `play()`.

        Raises:
            AudioSinkError: When the restarted player cannot be spawned.
        """

        with self._lock:
            if rate == self._rate or not self._running_locked():
                self._rate = rate
                return
            self._offset = self._position_locked()
            resume = not self._paused
            self._stop_locked()
            self._rate = rate
            if not resume:
                return
            process = self._spawn_locked()
            generation, attachment = self._generation, self._attachment
            logger.debug("ffplay restarted at {:.3f}s with atempo={:g}", self._offset, rate)
        self._watch_in_background(process, generation, attachment)

    def close(self) -> None:
        """Stop playback and release the subprocess."""

        self.detach()

    def _running_locked(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def _position_locked(self) -> float:
        if self._resumed_at is None:
            return self._offset
        return self._offset + (self._clock() - self._resumed_at) * self._rate

    def _spawn_locked(self) -> subprocess.Popen[bytes]:
        command = [self._executable, "-nodisp", "-autoexit", "-loglevel", "error"]
        if self._offset > 0:
            command += ["-ss", f"{self._offset:.3f}"]
        command += ["-af", f"atempo={self._rate:g}", str(self._resource)]
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            raise AudioSinkError(f"Could not start `{self._executable}`: {exc}") from exc
        self._process = process
        self._paused = False
        self._resumed_at = self._clock()
        return process

    def _stop_locked(self) -> None:
        process = self._process
        self._process = None
        self._paused = False
        self._resumed_at = None
        if process is None or process.poll() is not None:
            return
        process.send_signal(signal.SIGCONT)
        process.terminate()
        try:
            process.wait(timeout=2.0)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()

    def _watch_in_background(
        self, process: subprocess.Popen[bytes], generation: int, attachment: int
    ) -> None:
        watcher = threading.Thread(
            target=self._watch,
            args=(process, generation, attachment),
            name="duetcast-ffplay-watch",
            daemon=True,
        )
        watcher.start()

    def _watch(self, process: subprocess.Popen[bytes], generation: int, attachment: int) -> None:
        _, stderr = process.communicate()
        with self._lock:
            if generation != self._generation or process is not self._process:
                return
            self._process = None
            self._resumed_at = None
        if self._listener is None:
            return
        # The listener compares `attachment` under its own lock, which also
        # covers attachments made after the check above.
        if process.returncode == 0:
            self._listener.on_ended(attachment)
            return
        detail = stderr.decode("utf-8", errors="replace").strip() or (
            f"`ffplay` exited with code {process.returncode}"
        )
        logger.debug("ffplay failed: {}", detail)
        self._listener.on_error(detail, attachment)
