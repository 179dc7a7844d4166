"""Integration-test fixtures for deterministic provider behavior."""

from __future__ import annotations

import pytest

from duetcast.llm.gemini_client import GeminiClient
from duetcast.llm.openai_client import OpenAIChatClient, OpenAISpeechClient

MOCK_TRANSCRIPT = "Intro music fades.\nHost: Welcome to the show.\nGuest: Thanks for having me.\nIt is great."


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop ambient API keys and `DUETCAST_*` settings from the process environment."""

    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    for key in ("DUETCAST_DATA_DIR", "DUETCAST_PROVIDER_TRANSCRIPT", "DUETCAST_HOST_VOICE", "DUETCAST_GUEST_VOICE"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _mock_provider_calls(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock provider HTTP calls in integration tests to avoid network requirements."""

    def _mock_generate_text(self, **kwargs: object) -> str:
        """Return a deterministic labeled transcript."""

        _ = self
        _ = kwargs
        return MOCK_TRANSCRIPT

    def _mock_chat_completion(self, **kwargs: object) -> str:
        """Return a deterministic labeled transcript."""

        _ = self
        _ = kwargs
        return MOCK_TRANSCRIPT

    def _mock_synthesize_speech(self, **kwargs: object) -> bytes:
        """Return deterministic placeholder audio bytes."""

        _ = self
        return f"ID3:{kwargs['voice']}".encode("utf-8")

    monkeypatch.setattr(GeminiClient, "generate_text", _mock_generate_text)
    monkeypatch.setattr(OpenAIChatClient, "chat_completion_text", _mock_chat_completion)
    monkeypatch.setattr(OpenAISpeechClient, "synthesize_speech", _mock_synthesize_speech)
