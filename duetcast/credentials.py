"""Secure credential storage helpers for the Duetcast CLI.

Responsibilities:
- Persist provider API keys in an OS-backed secure credential store.
- Provide read/write/delete operations keyed by provider id.
- Avoid logging or exposing secret values in diagnostics.

Key types:
- `CredentialStore`: interface for provider credential persistence.
- `KeyringCredentialStore`: keyring-backed secure credential storage.
"""

from __future__ import annotations

from dataclasses import dataclass

import keyring
from keyring.errors import KeyringError, PasswordDeleteError
from loguru import logger


_DEFAULT_SERVICE_NAME = "duetcast"
SUPPORTED_CREDENTIAL_PROVIDERS = ("gemini", "openai")


def account_name_for(provider_id: str) -> str:
    """Return the keyring account name used for a provider API key."""

    if provider_id not in SUPPORTED_CREDENTIAL_PROVIDERS:
        supported = ", ".join(SUPPORTED_CREDENTIAL_PROVIDERS)
        raise ValueError(f"Unsupported credential provider `{provider_id}`; supported: {supported}.")
    return f"{provider_id}_api_key"


class CredentialStore:
    """Interface for secure provider credential operations."""

    def get_api_key(self, provider_id: str) -> str | None:
        """Load the stored API key for a provider, when available."""

        raise NotImplementedError

    def set_api_key(self, provider_id: str, api_key: str) -> None:
        """Persist an API key for a provider."""

        raise NotImplementedError

    def clear_api_key(self, provider_id: str) -> bool:
        """Delete a stored API key and return whether one existed."""

        raise NotImplementedError


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Secure credential store backed by the `keyring` package."""

    service_name: str = _DEFAULT_SERVICE_NAME

    def get_api_key(self, provider_id: str) -> str | None:
        """Get a normalized API key from keyring, returning `None` when missing."""

        try:
            value = keyring.get_password(self.service_name, account_name_for(provider_id))
        except KeyringError as exc:
            logger.debug("Keyring lookup failed for {}: {}", provider_id, type(exc).__name__)
            return None
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None

    def set_api_key(self, provider_id: str, api_key: str) -> None:
        """Persist a normalized API key in keyring."""

        normalized = api_key.strip()
        if not normalized:
            raise ValueError("API key must be a non-empty string.")
        keyring.set_password(self.service_name, account_name_for(provider_id), normalized)

    def clear_api_key(self, provider_id: str) -> bool:
        """Remove the stored API key from keyring and report if one was present."""

        if self.get_api_key(provider_id) is None:
            return False
        try:
            keyring.delete_password(self.service_name, account_name_for(provider_id))
        except PasswordDeleteError:
            return False
        return True


def create_credential_store() -> CredentialStore:
    """Create the default secure credential store implementation."""

    return KeyringCredentialStore()
