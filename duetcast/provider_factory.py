"""Provider factory helpers for transcript and speech stages.

Responsibilities:
- Resolve provider identifiers to concrete stage implementations.
- Keep orchestration independent from concrete provider class construction.
"""

from __future__ import annotations

from .llm.transcript import (
    GeminiTranscriptRequester,
    GenerationOptions,
    OpenAITranscriptRequester,
    TranscriptRequester,
)
from .tts.synthesizer import OpenAISpeechSynthesizer, SpeechSynthesizer


class ProviderFactory:
    """Factory for provider-backed stage clients used by the pipeline."""

    @staticmethod
    def create_transcript_requester(
        provider_id: str,
        model: str,
        api_key: str | None = None,
        options: GenerationOptions | None = None,
        timeout_seconds: float = 120.0,
    ) -> TranscriptRequester:
        """Create a transcript requester for a configured provider identifier."""

        if provider_id == "gemini":
            return GeminiTranscriptRequester(
                model=model,
                provider_id=provider_id,
                api_key=api_key,
                options=options,
                timeout_seconds=timeout_seconds,
            )
        if provider_id == "openai":
            return OpenAITranscriptRequester(
                model=model,
                provider_id=provider_id,
                api_key=api_key,
                options=options,
                timeout_seconds=timeout_seconds,
            )
        raise ValueError(f"Unsupported transcript provider `{provider_id}`.")

    @staticmethod
    def create_speech_synthesizer(
        provider_id: str,
        model: str,
        api_key: str | None = None,
        audio_format: str = "mp3",
        timeout_seconds: float = 120.0,
    ) -> SpeechSynthesizer:
        """Create a speech synthesizer for a configured provider identifier."""

        if provider_id == "openai":
            return OpenAISpeechSynthesizer(
                model=model,
                provider_id=provider_id,
                api_key=api_key,
                audio_format=audio_format,
                timeout_seconds=timeout_seconds,
            )
        raise ValueError(f"Unsupported TTS provider `{provider_id}`.")
