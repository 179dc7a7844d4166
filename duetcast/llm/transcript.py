"""Transcript requesters backed by text-generation providers.

Responsibilities:
- Issue the single upstream call that produces the raw podcast transcript.
- Map provider failures to `UpstreamFailureError` for the `transcript` stage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from ..errors import UpstreamFailureError
from .gemini_client import GeminiClient
from .http_client import ProviderHTTPError
from .openai_client import OpenAIChatClient
from .prompts import PromptLibrary


@dataclass(frozen=True, slots=True)
class GenerationOptions:
    """Reasoning and search toggles for transcript generation.

    Attributes:
        thinking: Enable model thinking when the provider supports it.
        thinking_budget: Thinking token budget used when `thinking` is on.
        web_search: Ground generation with web search when supported.
    """

    thinking: bool = True
    thinking_budget: int = 30000
    web_search: bool = True


class TranscriptRequester(Protocol):
    """Protocol for transcript generation providers."""

    provider_id: str

    def request_transcript(self, topic: str) -> str:
        """Return raw transcript text for a topic; `""` is a legal result."""


def _upstream_failure(exc: ProviderHTTPError) -> UpstreamFailureError:
    return UpstreamFailureError(
        stage="transcript",
        detail=str(exc),
        status_code=exc.status_code,
        failure_kind=exc.failure_kind,
        hint="Check the text-generation API key, model, and quota.",
    )


class GeminiTranscriptRequester:
    """Gemini-backed transcript requester with thinking and search grounding."""

    def __init__(
        self,
        model: str = "gemini-2.5-pro",
        provider_id: str = "gemini",
        api_key: str | None = None,
        options: GenerationOptions | None = None,
        timeout_seconds: float = 120.0,
        prompts: PromptLibrary | None = None,
    ) -> None:
        self.model = model
        self.provider_id = provider_id
        self.options = options or GenerationOptions()
        self.prompts = prompts or PromptLibrary()
        self.client = GeminiClient(api_key=api_key, timeout_seconds=timeout_seconds)

    def request_transcript(self, topic: str) -> str:
        """Generate a transcript for `topic` through Gemini `generateContent`."""

        try:
            return self.client.generate_text(
                model=self.model,
                prompt=self.prompts.podcast_script_prompt(topic),
                web_search=self.options.web_search,
                thinking_budget=self.options.thinking_budget if self.options.thinking else None,
            )
        except ProviderHTTPError as exc:
            raise _upstream_failure(exc) from exc


class OpenAITranscriptRequester:
    """OpenAI chat-completions transcript requester."""

    def __init__(
        self,
        model: str = "gpt-4.1-mini",
        provider_id: str = "openai",
        api_key: str | None = None,
        options: GenerationOptions | None = None,
        timeout_seconds: float = 120.0,
        prompts: PromptLibrary | None = None,
    ) -> None:
        self.model = model
        self.provider_id = provider_id
        self.options = options or GenerationOptions()
        self.prompts = prompts or PromptLibrary()
        self.client = OpenAIChatClient(api_key=api_key, timeout_seconds=timeout_seconds)

    def request_transcript(self, topic: str) -> str:
        """Generate a transcript for `topic` through chat completions."""

        if self.options.web_search or self.options.thinking:
            logger.debug("OpenAI chat transcript ignores thinking/web-search toggles")
        try:
            return self.client.chat_completion_text(
                model=self.model,
                system_prompt=self.prompts.podcast_system_prompt(),
                user_prompt=self.prompts.podcast_topic_prompt(topic),
            )
        except ProviderHTTPError as exc:
            raise _upstream_failure(exc) from exc
