"""OpenAI HTTP clients for transcript generation and speech synthesis."""

from __future__ import annotations

from typing import Any

from .http_client import ProviderHTTPClient, ProviderHTTPError


class _OpenAIBaseClient(ProviderHTTPClient):
    """OpenAI REST settings shared by chat and speech clients."""

    provider_label = "OpenAI"
    api_key_env = "OPENAI_API_KEY"

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://api.openai.com/v1",
        timeout_seconds: float = 120.0,
    ) -> None:
        super().__init__(api_key=api_key, base_url=base_url, timeout_seconds=timeout_seconds)

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}


class OpenAIChatClient(_OpenAIBaseClient):
    """Minimal requests-based OpenAI chat-completions HTTP client."""

    def chat_completion_text(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """Return the first assistant text response, or `""` when it has no text."""

        self._require_api_key()

        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        response_payload = self._post_json(endpoint_path="/chat/completions", payload=payload)
        return self._extract_message_text(response_payload)

    @staticmethod
    def _extract_message_text(payload: Any) -> str:
        """Extract first assistant message text from a chat-completions payload."""

        if not isinstance(payload, dict):
            raise ProviderHTTPError("OpenAI response is not a JSON object.")
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ProviderHTTPError("OpenAI response missing non-empty `choices` list.")

        first_choice = choices[0]
        if not isinstance(first_choice, dict):
            raise ProviderHTTPError("OpenAI response `choices[0]` is malformed.")

        message = first_choice.get("message")
        if not isinstance(message, dict):
            raise ProviderHTTPError("OpenAI response missing `choices[0].message` object.")

        return OpenAIChatClient._message_content_to_text(message.get("content")).strip()

    @staticmethod
    def _message_content_to_text(content: Any) -> str:
        """Convert OpenAI message content variants into a plain text string."""

        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts: list[str] = []
            for item in content:
                if not isinstance(item, dict):
                    continue
                if item.get("type") == "text" and isinstance(item.get("text"), str):
                    parts.append(item["text"])
            return "".join(parts)
        return ""


class OpenAISpeechClient(_OpenAIBaseClient):
    """Minimal requests-based OpenAI speech HTTP client for TTS synthesis."""

    def synthesize_speech(
        self,
        *,
        model: str,
        voice: str,
        text: str,
        response_format: str = "mp3",
    ) -> bytes:
        """Return synthesized audio bytes from OpenAI `/audio/speech`."""

        self._require_api_key()

        payload = {
            "model": model,
            "voice": voice,
            "input": text,
            "response_format": response_format,
        }
        return self._post_json_bytes(
            endpoint_path="/audio/speech",
            payload=payload,
            require_non_empty_response=True,
            empty_response_message="OpenAI speech response is empty.",
        )
