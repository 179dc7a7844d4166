"""Sequential playback of synthesized podcast segments."""

from .controller import PlaybackController, PlaybackState, PlaybackStatus
from .sink import AudioSink, AudioSinkError, FfplayAudioSink, SinkListener

__all__ = [
    "AudioSink",
    "AudioSinkError",
    "FfplayAudioSink",
    "PlaybackController",
    "PlaybackState",
    "PlaybackStatus",
    "SinkListener",
]
