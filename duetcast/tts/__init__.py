"""Text-to-speech provider abstractions.

This package contains voice mappings and the sequential chunk synthesizer.
"""

from .synthesizer import OpenAISpeechSynthesizer, SpeechSynthesizer, VoiceSynthesizer
from .voices import DEFAULT_VOICE_MAP, VoiceMap, VoiceProfile

__all__ = [
    "DEFAULT_VOICE_MAP",
    "OpenAISpeechSynthesizer",
    "SpeechSynthesizer",
    "VoiceMap",
    "VoiceProfile",
    "VoiceSynthesizer",
]
