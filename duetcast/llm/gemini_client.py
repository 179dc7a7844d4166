"""Gemini `generateContent` HTTP client for transcript generation."""

from __future__ import annotations

from typing import Any

from .http_client import ProviderHTTPClient, ProviderHTTPError


class GeminiClient(ProviderHTTPClient):
    """Minimal requests-based client for the Gemini REST API."""

    provider_label = "Gemini"
    api_key_env = "GEMINI_API_KEY"

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_seconds: float = 120.0,
    ) -> None:
        super().__init__(api_key=api_key, base_url=base_url, timeout_seconds=timeout_seconds)

    def _auth_headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self.api_key}

    def generate_text(
        self,
        *,
        model: str,
        prompt: str,
        web_search: bool = False,
        thinking_budget: int | None = None,
    ) -> str:
        """Return concatenated candidate text, or `""` when the model returned none.

        Args:
            model: Gemini model identifier, for example `gemini-2.5-pro`.
            prompt: Full user prompt.
            web_search: Attach the Google Search grounding tool.
            thinking_budget: Thinking token budget; `None` leaves the model default.
        """

        self._require_api_key()

        payload: dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if web_search:
            payload["tools"] = [{"google_search": {}}]
        if thinking_budget is not None:
            payload["generationConfig"] = {"thinkingConfig": {"thinkingBudget": thinking_budget}}

        response_payload = self._post_json(
            endpoint_path=f"/models/{model}:generateContent",
            payload=payload,
        )
        return self._extract_candidate_text(response_payload)

    @staticmethod
    def _extract_candidate_text(payload: Any) -> str:
        """Join non-thought text parts of the first candidate."""

        if not isinstance(payload, dict):
            raise ProviderHTTPError("Gemini response is not a JSON object.")
        candidates = payload.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return ""
        first = candidates[0]
        if not isinstance(first, dict):
            raise ProviderHTTPError("Gemini response `candidates[0]` is malformed.")
        content = first.get("content")
        if not isinstance(content, dict):
            return ""
        parts = content.get("parts")
        if not isinstance(parts, list):
            return ""
        texts = [
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str) and not part.get("thought")
        ]
        return "".join(texts).strip()
