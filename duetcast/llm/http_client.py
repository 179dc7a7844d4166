"""Shared HTTP client plumbing for text-generation and speech providers.

Responsibilities:
- Send JSON POST requests with a bounded timeout and provider auth headers.
- Map HTTP and transport failures into one normalized provider exception.
- Redact secrets and cap provider messages for user-facing diagnostics.

Failure kinds:
    `invalid_api_key`, `insufficient_quota`, `invalid_model`, `timeout`,
    `transport`, `http_error`, `unknown`.
"""

from __future__ import annotations

import json
import re
import socket
from typing import Any

import requests


_MAX_MESSAGE_CHARS = 180

_SECRET_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bsk-[A-Za-z0-9_-]{8,}\b"), "[redacted-key]"),
    (re.compile(r"\bAIza[A-Za-z0-9_-]{8,}\b"), "[redacted-key]"),
    (re.compile(r"(?i)bearer\s+[A-Za-z0-9._-]{12,}"), "Bearer [redacted-token]"),
)

# Provider error codes (OpenAI `code`, Gemini `status`), lower-cased.
_AUTH_CODES = frozenset({"invalid_api_key", "unauthenticated", "permission_denied"})
_QUOTA_CODES = frozenset({"insufficient_quota", "resource_exhausted"})
_MODEL_CODES = frozenset({"model_not_found"})
_TIMEOUT_CODES = frozenset({"deadline_exceeded"})

_HEADLINES = {
    "invalid_api_key": "authentication failed",
    "insufficient_quota": "quota is insufficient for this request",
    "invalid_model": "rejected the selected model",
    "timeout": "request timed out",
}


class ProviderHTTPError(RuntimeError):
    """Raised when a provider request fails or returns malformed output."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


def redact_secrets(text: str) -> str:
    """Replace API-key and bearer-token lookalikes with fixed placeholders."""

    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def compact_message(text: str, limit: int = _MAX_MESSAGE_CHARS) -> str:
    """Collapse whitespace and cap the message at `limit` characters."""

    compact = " ".join(text.split())
    if len(compact) <= limit:
        return compact
    return f"{compact[: limit - 1]}..."


def classify_http_failure(status_code: int, message: str, provider_code: str | None) -> str:
    """Map an HTTP failure to one failure kind; the first matching rule wins."""

    lowered = message.lower()
    code = (provider_code or "").lower()

    if status_code in (401, 403) or code in _AUTH_CODES or "api key" in lowered:
        return "invalid_api_key"
    if code in _QUOTA_CODES or (status_code == 429 and "quota" in lowered):
        return "insufficient_quota"
    if code in _MODEL_CODES or (
        "model" in lowered
        and ("not found" in lowered or "does not exist" in lowered or "invalid" in lowered)
    ):
        return "invalid_model"
    if status_code in (408, 504) or code in _TIMEOUT_CODES:
        return "timeout"
    if "timed out" in lowered or "timeout" in lowered:
        return "timeout"
    return "http_error"


def parse_error_body(body: str) -> tuple[str, str | None]:
    """Return a redacted, capped message and the provider error code, if any.

    Both providers wrap errors as `{"error": {"message": ..., "code"|"status": ...}}`;
    any other body is reported verbatim.
    """

    if not body:
        return "", None
    message = body
    provider_code: str | None = None
    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        payload = None
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        raw_message = error.get("message")
        if isinstance(raw_message, str) and raw_message.strip():
            message = raw_message.strip()
        for key in ("code", "status"):
            raw_code = error.get(key)
            if isinstance(raw_code, str) and raw_code.strip():
                provider_code = raw_code.strip()
                break
    return compact_message(redact_secrets(message)), provider_code


class ProviderHTTPClient:
    """Base class for provider clients.

    Subclasses set `provider_label` and `api_key_env` and implement
    `_auth_headers`.
    """

    provider_label = "Provider"
    api_key_env = ""

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str,
        timeout_seconds: float = 120.0,
    ) -> None:
        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def _auth_headers(self) -> dict[str, str]:
        raise NotImplementedError

    def _require_api_key(self) -> None:
        if not self.api_key:
            raise ProviderHTTPError(
                f"Missing {self.provider_label} API key. Set `{self.api_key_env}`, "
                "use the CLI key option, or store one with `duetcast credentials set`.",
                failure_kind="invalid_api_key",
            )

    def _post_json_bytes(
        self,
        *,
        endpoint_path: str,
        payload: dict[str, Any],
        require_non_empty_response: bool = False,
        empty_response_message: str | None = None,
    ) -> bytes:
        """POST `payload` as JSON and return the raw response body.

        Raises:
            ProviderHTTPError: On HTTP errors, transport errors, timeouts, or an
                empty body when `require_non_empty_response` is set.
        """

        try:
            response = requests.post(
                f"{self.base_url}{endpoint_path}",
                headers={"Content-Type": "application/json", **self._auth_headers()},
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise self._from_http_error(exc) from exc
        except (requests.RequestException, TimeoutError) as exc:
            raise self._from_transport_error(exc) from exc

        body = bytes(response.content)
        if require_non_empty_response and not body:
            raise ProviderHTTPError(
                empty_response_message or f"{self.provider_label} response is empty."
            )
        return body

    def _post_json(self, *, endpoint_path: str, payload: dict[str, Any]) -> Any:
        """POST `payload` as JSON and decode the JSON response body."""

        body = self._post_json_bytes(endpoint_path=endpoint_path, payload=payload)
        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ProviderHTTPError(
                f"{self.provider_label} returned invalid JSON payload."
            ) from exc

    def _from_transport_error(self, exc: Exception) -> ProviderHTTPError:
        if isinstance(exc, (TimeoutError, socket.timeout, requests.Timeout)):
            return ProviderHTTPError(
                f"{self.provider_label} request timed out.", failure_kind="timeout"
            )
        return ProviderHTTPError(
            f"{self.provider_label} request transport error: {compact_message(str(exc))}",
            failure_kind="transport",
        )

    def _from_http_error(self, exc: requests.HTTPError) -> ProviderHTTPError:
        response = exc.response
        status_code = response.status_code if response is not None else 0
        body = ""
        if response is not None:
            body = bytes(response.content).decode("utf-8", errors="replace").strip()
        message, provider_code = parse_error_body(body)
        failure_kind = classify_http_failure(status_code, message, provider_code)

        headline = f"{self.provider_label} {_HEADLINES.get(failure_kind, 'request failed')}"
        detail = f"{headline} (HTTP {status_code})"
        detail = f"{detail}: {message}" if message else f"{detail}."
        return ProviderHTTPError(
            detail,
            failure_kind=failure_kind,
            status_code=status_code,
            provider_code=provider_code,
        )
