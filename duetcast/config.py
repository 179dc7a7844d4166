"""Configuration model and loaders for Duetcast.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Provide deterministic precedence resolution for provider/model/key settings.
- Provide loader entry points for YAML- and environment-based configuration.

Key types:
- `DuetcastConfig`: normalized settings for generation and playback.
- `ProviderRuntimeConfig`: resolved provider/model/voice/key values.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `DuetcastConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .models.datatypes import SPEED_OPTIONS
from .parsing import normalize_optional_string, parse_boolean


_DEFAULT_TRANSCRIPT_MODELS = {"gemini": "gemini-2.5-pro", "openai": "gpt-4.1-mini"}
_DEFAULT_TTS_MODEL = "tts-1"
_DEFAULT_HOST_VOICE = "alloy"
_DEFAULT_GUEST_VOICE = "nova"
_SUPPORTED_TRANSCRIPT_PROVIDERS = frozenset({"gemini", "openai"})
_SUPPORTED_TTS_PROVIDERS = frozenset({"openai"})
_API_KEY_ENV = {"gemini": "GEMINI_API_KEY", "openai": "OPENAI_API_KEY"}


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProviderRuntimeConfig:
    """Resolved provider, model, voice, and credential values for one run."""

    transcript_provider: str
    transcript_model: str
    tts_provider: str
    tts_model: str
    host_voice: str
    guest_voice: str
    api_keys: Mapping[str, str] = field(default_factory=dict)

    def api_key_for(self, provider_id: str) -> str | None:
        """Return the resolved API key for a provider, or `None` when absent."""

        return normalize_optional_string(self.api_keys.get(provider_id))

    def required_providers(self) -> tuple[str, ...]:
        """Return provider ids whose keys must be present, in call order."""

        providers = [self.transcript_provider]
        if self.tts_provider not in providers:
            providers.append(self.tts_provider)
        return tuple(providers)


@dataclass(slots=True)
class DuetcastConfig:
    """Runtime configuration for podcast generation and playback.

    Attributes:
        data_dir: Directory holding audio files and the history file.
        provider_transcript: Text-generation provider (`gemini` or `openai`).
        model_transcript: Text-generation model; provider default when `None`.
        provider_tts: Speech provider identifier.
        model_tts: Speech model identifier.
        host_voice: Voice identifier for the host.
        guest_voice: Voice identifier for the guest.
        audio_format: Requested audio container, stored as the file suffix.
        enable_thinking: Ask the text model to think before answering.
        thinking_budget: Thinking token budget.
        enable_web_search: Ground the transcript with web search.
        request_timeout_seconds: Per-request upstream timeout.
        request_interval_seconds: Minimum spacing between speech request starts.
        playback_speed: Initial playback speed multiplier.
        gemini_api_key: Optional Gemini API key.
        openai_api_key: Optional OpenAI API key.
        runtime_sources: Optional runtime source overrides injected by CLI.
    """

    data_dir: Path = Path(".duetcast")
    provider_transcript: str = "gemini"
    model_transcript: str | None = None
    provider_tts: str = "openai"
    model_tts: str = _DEFAULT_TTS_MODEL
    host_voice: str = _DEFAULT_HOST_VOICE
    guest_voice: str = _DEFAULT_GUEST_VOICE
    audio_format: str = "mp3"
    enable_thinking: bool = True
    thinking_budget: int = 30000
    enable_web_search: bool = True
    request_timeout_seconds: float = 120.0
    request_interval_seconds: float = 0.05
    playback_speed: float = 1.0
    gemini_api_key: str | None = None
    openai_api_key: str | None = None
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)

    @property
    def audio_dir(self) -> Path:
        return self.data_dir / "audio"

    @property
    def history_path(self) -> Path:
        return self.data_dir / "history.json"

    def validate(self) -> None:
        """Validate configuration values before pipeline execution."""

        self._validate_choice(
            self.provider_transcript, _SUPPORTED_TRANSCRIPT_PROVIDERS, "provider_transcript"
        )
        self._validate_choice(self.provider_tts, _SUPPORTED_TTS_PROVIDERS, "provider_tts")
        if self.model_transcript is not None:
            self._require_non_empty(self.model_transcript, "model_transcript")
        self._require_non_empty(self.model_tts, "model_tts")
        self._require_non_empty(self.host_voice, "host_voice")
        self._require_non_empty(self.guest_voice, "guest_voice")
        self._require_non_empty(self.audio_format, "audio_format")
        if self.host_voice.strip() == self.guest_voice.strip():
            raise ValueError("`host_voice` and `guest_voice` must differ.")
        if self.thinking_budget <= 0:
            raise ValueError("`thinking_budget` must be a positive integer.")
        if self.request_timeout_seconds <= 0:
            raise ValueError("`request_timeout_seconds` must be positive.")
        if self.request_interval_seconds < 0:
            raise ValueError("`request_interval_seconds` must not be negative.")
        if self.playback_speed not in SPEED_OPTIONS:
            supported = ", ".join(f"{option:g}" for option in SPEED_OPTIONS)
            raise ValueError(f"`playback_speed` must be one of: {supported}.")

    def resolved_provider_runtime(
        self, sources: RuntimeConfigSources | None = None
    ) -> ProviderRuntimeConfig:
        """Resolve provider settings with deterministic source precedence.

        Precedence for each key is:
        `cli` > `secure` > `env` > config field default.
        """

        resolved_sources = sources if sources is not None else self.runtime_sources

        transcript_provider = self._resolve_runtime_value(
            "provider_transcript",
            "DUETCAST_PROVIDER_TRANSCRIPT",
            self.provider_transcript,
            resolved_sources,
        )
        self._validate_choice(
            transcript_provider, _SUPPORTED_TRANSCRIPT_PROVIDERS, "provider_transcript"
        )
        transcript_model = self._resolve_runtime_value(
            "model_transcript",
            "DUETCAST_MODEL_TRANSCRIPT",
            self.model_transcript or _DEFAULT_TRANSCRIPT_MODELS[transcript_provider],
            resolved_sources,
        )
        tts_provider = self._resolve_runtime_value(
            "provider_tts", "DUETCAST_PROVIDER_TTS", self.provider_tts, resolved_sources
        )
        self._validate_choice(tts_provider, _SUPPORTED_TTS_PROVIDERS, "provider_tts")
        tts_model = self._resolve_runtime_value(
            "model_tts", "DUETCAST_MODEL_TTS", self.model_tts, resolved_sources
        )
        host_voice = self._resolve_runtime_value(
            "host_voice", "DUETCAST_HOST_VOICE", self.host_voice, resolved_sources
        )
        guest_voice = self._resolve_runtime_value(
            "guest_voice", "DUETCAST_GUEST_VOICE", self.guest_voice, resolved_sources
        )
        if host_voice == guest_voice:
            raise ValueError("`host_voice` and `guest_voice` must differ.")

        api_keys: dict[str, str] = {}
        for provider_id, default_key in (
            ("gemini", self.gemini_api_key),
            ("openai", self.openai_api_key),
        ):
            value = self._resolve_optional_runtime_value(
                f"{provider_id}_api_key",
                _API_KEY_ENV[provider_id],
                default_key,
                resolved_sources,
            )
            if value is not None:
                api_keys[provider_id] = value

        return ProviderRuntimeConfig(
            transcript_provider=transcript_provider,
            transcript_model=transcript_model,
            tts_provider=tts_provider,
            tts_model=tts_model,
            host_voice=host_voice,
            guest_voice=guest_voice,
            api_keys=api_keys,
        )

    def _resolve_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str:
        """Resolve a required runtime value from sources in precedence order."""

        resolved = self._resolve_optional_runtime_value(key, env_key, default_value, sources)
        if resolved is None:
            raise ValueError(
                f"`{key}` could not be resolved from CLI, secure storage, env, or defaults."
            )
        return resolved

    @staticmethod
    def _resolve_optional_runtime_value(
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        for mapping, lookup_key in (
            (sources.cli, key),
            (sources.secure, key),
            (sources.env, env_key),
        ):
            value = normalize_optional_string(mapping.get(lookup_key))
            if value is not None:
                return value
        return normalize_optional_string(default_value)

    @staticmethod
    def _validate_choice(value: str, supported_values: frozenset[str], field_name: str) -> None:
        if value not in supported_values:
            supported = ", ".join(sorted(supported_values))
            raise ValueError(f"Unsupported `{field_name}` value `{value}`; supported: {supported}.")

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `DuetcastConfig` from external sources."""

    _STRING_KEYS = frozenset(
        {
            "provider_transcript",
            "model_transcript",
            "provider_tts",
            "model_tts",
            "host_voice",
            "guest_voice",
            "audio_format",
            "gemini_api_key",
            "openai_api_key",
        }
    )
    _BOOLEAN_KEYS = frozenset({"enable_thinking", "enable_web_search"})
    _SUPPORTED_YAML_KEYS = _STRING_KEYS | _BOOLEAN_KEYS | frozenset(
        {
            "data_dir",
            "thinking_budget",
            "request_timeout_seconds",
            "request_interval_seconds",
            "playback_speed",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> DuetcastConfig:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML `{path}` must contain a mapping at the top level.")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> DuetcastConfig:
        """Create a validated config from `DUETCAST_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, Any] = {}
        for key in ConfigLoader._SUPPORTED_YAML_KEYS:
            value = normalize_optional_string(env_map.get(f"DUETCAST_{key.upper()}"))
            if value is not None:
                payload[key] = value
        for provider_id, env_key in _API_KEY_ENV.items():
            value = normalize_optional_string(env_map.get(env_key))
            if value is not None:
                payload.setdefault(f"{provider_id}_api_key", value)
        return ConfigLoader.from_mapping(payload, source_label="environment")

    @staticmethod
    def from_mapping(payload: Mapping[str, Any], source_label: str) -> DuetcastConfig:
        """Build and validate a config from a flat key/value mapping."""

        unknown = sorted(str(key) for key in payload if key not in ConfigLoader._SUPPORTED_YAML_KEYS)
        if unknown:
            raise ValueError(f"Unsupported keys in {source_label}: {', '.join(unknown)}.")

        kwargs: dict[str, Any] = {}
        for key, value in payload.items():
            if value is None:
                continue
            if key in ConfigLoader._STRING_KEYS:
                kwargs[key] = normalize_optional_string(value)
            elif key in ConfigLoader._BOOLEAN_KEYS:
                kwargs[key] = parse_boolean(value, key)
            elif key == "data_dir":
                directory = normalize_optional_string(str(value))
                kwargs[key] = Path(directory) if directory is not None else None
            elif key == "thinking_budget":
                kwargs[key] = ConfigLoader._number(value, key, int)
            else:
                kwargs[key] = ConfigLoader._number(value, key, float)

        config = DuetcastConfig(**{key: value for key, value in kwargs.items() if value is not None})
        config.validate()
        return config

    @staticmethod
    def _number(value: Any, key: str, kind: type) -> Any:
        if isinstance(value, bool):
            raise ValueError(f"`{key}` must be numeric.")
        try:
            return kind(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"`{key}` must be numeric.") from exc
