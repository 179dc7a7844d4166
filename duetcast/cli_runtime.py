"""Per-run provider settings for the `generate` command.

Collects CLI overrides and prompted API keys into the `cli` config source,
reads stored keys into the `secure` source, and persists keys on request.
"""

from __future__ import annotations

from typing import Callable, Protocol

import typer

from .credentials import SUPPORTED_CREDENTIAL_PROVIDERS, create_credential_store
from .errors import PipelineStageError
from .parsing import normalize_optional_string


class CredentialStoreProtocol(Protocol):
    """Subset of `CredentialStore` used while resolving runtime sources."""

    def get_api_key(self, provider_id: str) -> str | None: ...

    def set_api_key(self, provider_id: str, api_key: str) -> None: ...


def _put_if_present(values: dict[str, str], key: str, value: str | None) -> None:
    normalized = normalize_optional_string(value)
    if normalized is not None:
        values[key] = normalized


def prompt_for_api_key(provider_id: str) -> str | None:
    """Prompt for a hidden provider API key; blank input returns `None`."""

    return normalize_optional_string(
        typer.prompt(
            f"{provider_id.capitalize()} API key (hidden; leave blank to skip)",
            default="",
            hide_input=True,
            show_default=False,
        )
    )


def resolve_provider_runtime_sources(
    provider_transcript: str | None,
    model_transcript: str | None,
    model_tts: str | None,
    host_voice: str | None,
    guest_voice: str | None,
    api_keys: dict[str, str | None],
    prompt_api_key: bool,
    store_api_key: bool,
    credential_store_factory: Callable[[], CredentialStoreProtocol] = create_credential_store,
) -> tuple[dict[str, str], dict[str, str]]:
    """Resolve CLI and secure runtime source mappings for provider configuration."""

    runtime_cli_values: dict[str, str] = {}
    _put_if_present(runtime_cli_values, "provider_transcript", provider_transcript)
    _put_if_present(runtime_cli_values, "model_transcript", model_transcript)
    _put_if_present(runtime_cli_values, "model_tts", model_tts)
    _put_if_present(runtime_cli_values, "host_voice", host_voice)
    _put_if_present(runtime_cli_values, "guest_voice", guest_voice)
    for provider_id in SUPPORTED_CREDENTIAL_PROVIDERS:
        _put_if_present(runtime_cli_values, f"{provider_id}_api_key", api_keys.get(provider_id))

    entered_in_run: set[str] = {
        provider_id
        for provider_id in SUPPORTED_CREDENTIAL_PROVIDERS
        if f"{provider_id}_api_key" in runtime_cli_values
    }
    if prompt_api_key:
        for provider_id in SUPPORTED_CREDENTIAL_PROVIDERS:
            if provider_id in entered_in_run:
                continue
            prompted = prompt_for_api_key(provider_id)
            if prompted is not None:
                runtime_cli_values[f"{provider_id}_api_key"] = prompted
                entered_in_run.add(provider_id)

    credential_store = credential_store_factory()
    runtime_secure_values: dict[str, str] = {}
    for provider_id in SUPPORTED_CREDENTIAL_PROVIDERS:
        stored_api_key = credential_store.get_api_key(provider_id)
        if stored_api_key is not None:
            runtime_secure_values[f"{provider_id}_api_key"] = stored_api_key

    if store_api_key:
        for provider_id in sorted(entered_in_run):
            try:
                credential_store.set_api_key(
                    provider_id, runtime_cli_values[f"{provider_id}_api_key"]
                )
            except Exception as exc:
                raise PipelineStageError(
                    stage="credentials",
                    detail=f"Failed to store {provider_id} API key securely: {exc}",
                    hint=(
                        "Install and configure a keyring backend, or rerun without "
                        "`--store-api-key` for one-off usage."
                    ),
                ) from exc
            typer.echo(f"Stored {provider_id} API key in secure credential storage.")

    return runtime_cli_values, runtime_secure_values
