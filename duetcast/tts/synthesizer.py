"""Speech synthesis for speaker chunks.

Responsibilities:
- Define the per-request speech synthesis protocol and its OpenAI implementation.
- Synthesize chunk lists strictly sequentially, in order and paced, into stored segments.
- Discard already written audio when any request fails.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol
import uuid

from loguru import logger

from ..errors import UpstreamFailureError
from ..io.storage import AudioStore
from ..llm.http_client import ProviderHTTPError
from ..llm.openai_client import OpenAISpeechClient
from ..models.datatypes import Chunk, Segment
from ..pipeline.queue import SequentialTaskQueue
from .voices import DEFAULT_VOICE_MAP, VoiceMap, VoiceProfile


class SpeechSynthesizer(Protocol):
    """Protocol for one text-to-audio request."""

    provider_id: str
    audio_format: str

    def synthesize(self, text: str, voice: VoiceProfile) -> bytes:
        """Return a non-empty audio payload for `text` spoken by `voice`."""


class OpenAISpeechSynthesizer:
    """OpenAI `/audio/speech` synthesizer."""

    def __init__(
        self,
        model: str = "tts-1",
        provider_id: str = "openai",
        api_key: str | None = None,
        audio_format: str = "mp3",
        timeout_seconds: float = 120.0,
    ) -> None:
        self.model = model
        self.provider_id = provider_id
        self.audio_format = audio_format
        self.client = OpenAISpeechClient(api_key=api_key, timeout_seconds=timeout_seconds)

    def synthesize(self, text: str, voice: VoiceProfile) -> bytes:
        return self.client.synthesize_speech(
            model=self.model,
            voice=voice.provider_voice_id,
            text=text,
            response_format=self.audio_format,
        )


class VoiceSynthesizer:
    """Turn ordered speaker chunks into ordered stored audio segments."""

    def __init__(
        self,
        speech: SpeechSynthesizer,
        audio_store: AudioStore,
        voices: VoiceMap = DEFAULT_VOICE_MAP,
        request_interval_seconds: float = 0.05,
    ) -> None:
        self.speech = speech
        self.audio_store = audio_store
        self.voices = voices
        self.request_interval_seconds = request_interval_seconds

    def synthesize(self, chunks: list[Chunk], run_id: str | None = None) -> list[Segment]:
        """Synthesize one segment per chunk, one request at a time, in chunk order.

        Raises:
            UpstreamFailureError: On the first failed request; no partial
                result is returned and files written by this call are released.
        """

        resolved_run_id = run_id or uuid.uuid4().hex
        written: list[Path] = []
        queue: SequentialTaskQueue[Segment] = SequentialTaskQueue(
            min_interval_seconds=self.request_interval_seconds
        )
        total = len(chunks)
        for index, chunk in enumerate(chunks):
            queue.submit(
                lambda index=index, chunk=chunk: self._synthesize_one(
                    resolved_run_id, index, total, chunk, written
                )
            )
        try:
            return queue.drain()
        except BaseException:
            for path in written:
                self.audio_store.release(path)
            raise

    def _synthesize_one(
        self,
        run_id: str,
        index: int,
        total: int,
        chunk: Chunk,
        written: list[Path],
    ) -> Segment:
        voice = self.voices.voice_for(chunk.speaker)
        logger.debug(
            "Synthesizing segment {}/{} speaker={} voice={}",
            index + 1,
            total,
            chunk.speaker.value,
            voice.provider_voice_id,
        )
        try:
            audio_bytes = self.speech.synthesize(chunk.text, voice)
        except ProviderHTTPError as exc:
            raise UpstreamFailureError(
                stage="synthesize",
                detail=f"Speech synthesis failed for segment {index + 1}/{total}: {exc}",
                status_code=exc.status_code,
                failure_kind=exc.failure_kind,
                hint="Check the speech API key, model, voice ids, and quota.",
            ) from exc
        relative = Path(run_id) / f"{index:03d}_{chunk.speaker.value}.{self.speech.audio_format}"
        path = self.audio_store.save_audio(relative, audio_bytes)
        written.append(path)
        return Segment(audio_ref=path, speaker=chunk.speaker, text=chunk.text)
