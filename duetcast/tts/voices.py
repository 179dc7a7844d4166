"""Voice profile models for synthesis configuration.

Responsibilities:
- Represent provider voice identities.
- Map speaker roles to voices through fixed configuration.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..models.datatypes import Speaker


@dataclass(frozen=True, slots=True)
class VoiceProfile:
    """Declarative voice profile used by TTS providers.

    Attributes:
        name: Human-readable profile name.
        provider_voice_id: Provider-native voice identifier.
    """

    name: str
    provider_voice_id: str


@dataclass(frozen=True, slots=True)
class VoiceMap:
    """Deterministic speaker-role to voice mapping."""

    host: VoiceProfile
    guest: VoiceProfile

    def __post_init__(self) -> None:
        if self.host.provider_voice_id == self.guest.provider_voice_id:
            raise ValueError("Host and guest must use distinct voices.")

    @classmethod
    def from_voice_ids(cls, host_voice: str, guest_voice: str) -> VoiceMap:
        """Build a voice map from provider voice identifiers."""

        return cls(
            host=VoiceProfile(name="host", provider_voice_id=host_voice),
            guest=VoiceProfile(name="guest", provider_voice_id=guest_voice),
        )

    def voice_for(self, speaker: Speaker) -> VoiceProfile:
        """Return the configured voice for a speaker role."""

        if speaker is Speaker.HOST:
            return self.host
        return self.guest


DEFAULT_VOICE_MAP = VoiceMap.from_voice_ids("alloy", "nova")
