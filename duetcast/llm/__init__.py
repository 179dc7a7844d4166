"""Text-generation facing abstractions.

This package defines HTTP provider clients, the podcast prompt library,
and transcript requesters.
"""

from .gemini_client import GeminiClient
from .http_client import ProviderHTTPClient, ProviderHTTPError
from .openai_client import OpenAIChatClient, OpenAISpeechClient
from .prompts import PromptLibrary
from .transcript import (
    GeminiTranscriptRequester,
    GenerationOptions,
    OpenAITranscriptRequester,
    TranscriptRequester,
)

__all__ = [
    "GeminiClient",
    "GeminiTranscriptRequester",
    "GenerationOptions",
    "OpenAIChatClient",
    "OpenAISpeechClient",
    "OpenAITranscriptRequester",
    "PromptLibrary",
    "ProviderHTTPClient",
    "ProviderHTTPError",
    "TranscriptRequester",
]
