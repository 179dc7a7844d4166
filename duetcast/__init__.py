"""Top-level package for Duetcast.

Duetcast turns a free-text topic into a two-voice podcast: a generated
host/guest transcript is split into speaker turns, each turn is synthesized
with a role-specific voice, and the segments are played back in order.
The main orchestration entry point is `PodcastPipeline`.
"""

from .pipeline.orchestrator import PodcastPipeline
from .pipeline.session import PodcastSession

__all__ = ["PodcastPipeline", "PodcastSession", "__version__"]

__version__ = "0.1.0"
