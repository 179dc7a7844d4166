"""Pipeline orchestration for Duetcast.

Responsibilities:
- Check credentials and topic before any upstream call.
- Run transcript -> segment -> synthesize -> history in order.
- Return an all-or-nothing `PodcastRun`.

Key types:
- `PodcastPipeline`: orchestration facade.
"""

from __future__ import annotations

from collections.abc import Callable
import uuid

from ..config import DuetcastConfig, ProviderRuntimeConfig
from ..errors import MissingCredentialError, MissingInputError
from ..history.store import HistoryStore
from ..io.kv_store import JsonFileKeyValueStore
from ..io.storage import AudioStore
from ..llm.transcript import GenerationOptions, TranscriptRequester
from ..models.datatypes import Chunk, PodcastRun, Segment
from ..provider_factory import ProviderFactory
from ..telemetry.logger import RunLogger
from ..text.segmenter import segment_transcript
from ..tts.synthesizer import SpeechSynthesizer, VoiceSynthesizer
from ..tts.voices import VoiceMap
from .telemetry import PipelineTelemetryMixin


class PodcastPipeline(PipelineTelemetryMixin):
    """Coordinate all stages for a single topic-to-audio run."""

    def __init__(
        self,
        config: DuetcastConfig,
        *,
        history: HistoryStore | None = None,
        audio_store: AudioStore | None = None,
        transcript_requester: TranscriptRequester | None = None,
        speech_synthesizer: SpeechSynthesizer | None = None,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
    ) -> None:
        """Initialize stage collaborators; missing ones are built from config."""

        config.validate()
        self.config = config
        self.audio_store = audio_store or AudioStore(config.audio_dir)
        self.history = history or HistoryStore(
            JsonFileKeyValueStore(config.history_path),
            audio_store=self.audio_store,
        )
        self._transcript_requester = transcript_requester
        self._speech_synthesizer = speech_synthesizer
        self._run_logger = run_logger
        self._stage_progress_callback = stage_progress_callback

    def run(self, topic: str) -> PodcastRun:
        """Generate, segment, synthesize, and store one podcast for `topic`.

        Raises:
            MissingCredentialError: A required API key is absent.
            MissingInputError: `topic` is empty.
            UpstreamFailureError: Transcript or speech request failed.
        """

        runtime = self.config.resolved_provider_runtime()
        self._require_credentials(runtime)
        normalized_topic = topic.strip()
        if not normalized_topic:
            raise MissingInputError()

        requester = self._transcript_requester or self._build_transcript_requester(runtime)
        synthesizer = VoiceSynthesizer(
            speech=self._speech_synthesizer or self._build_speech_synthesizer(runtime),
            audio_store=self.audio_store,
            voices=VoiceMap.from_voice_ids(runtime.host_voice, runtime.guest_voice),
            request_interval_seconds=self.config.request_interval_seconds,
        )
        run_id = uuid.uuid4().hex

        transcript = self._run_stage(
            "transcript",
            lambda: requester.request_transcript(normalized_topic),
            lambda text: {"provider": requester.provider_id, "chars": len(text)},
        )
        chunks: list[Chunk] = self._run_stage(
            "segment",
            lambda: segment_transcript(transcript),
            lambda result: {"chunks": len(result)},
        )
        segments: list[Segment] = self._run_stage(
            "synthesize",
            lambda: synthesizer.synthesize(chunks, run_id=run_id),
            lambda result: {"segments": len(result), "run_id": run_id},
        )
        try:
            stored = self._run_stage(
                "history",
                lambda: self.history.save(normalized_topic, transcript, segments),
                lambda podcast: {"history_id": podcast.id},
            )
        except BaseException:
            for segment in segments:
                self.audio_store.release(segment.audio_ref)
            raise
        return PodcastRun(
            run_id=run_id,
            topic=normalized_topic,
            transcript=transcript,
            chunks=tuple(chunks),
            segments=tuple(segments),
            history_id=stored.id,
        )

    def _require_credentials(self, runtime: ProviderRuntimeConfig) -> None:
        for provider_id in runtime.required_providers():
            if runtime.api_key_for(provider_id) is None:
                raise MissingCredentialError(
                    provider_id,
                    hint=(
                        f"Pass `--{provider_id}-api-key`, set the provider env variable, "
                        f"or run `duetcast credentials set {provider_id}`."
                    ),
                )

    def _build_transcript_requester(self, runtime: ProviderRuntimeConfig) -> TranscriptRequester:
        return ProviderFactory.create_transcript_requester(
            provider_id=runtime.transcript_provider,
            model=runtime.transcript_model,
            api_key=runtime.api_key_for(runtime.transcript_provider),
            options=GenerationOptions(
                thinking=self.config.enable_thinking,
                thinking_budget=self.config.thinking_budget,
                web_search=self.config.enable_web_search,
            ),
            timeout_seconds=self.config.request_timeout_seconds,
        )

    def _build_speech_synthesizer(self, runtime: ProviderRuntimeConfig) -> SpeechSynthesizer:
        return ProviderFactory.create_speech_synthesizer(
            provider_id=runtime.tts_provider,
            model=runtime.tts_model,
            api_key=runtime.api_key_for(runtime.tts_provider),
            audio_format=self.config.audio_format,
            timeout_seconds=self.config.request_timeout_seconds,
        )
