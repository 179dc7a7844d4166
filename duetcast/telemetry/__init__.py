"""Run logging for pipeline and playback activity."""

from .logger import RunLogger, configure_logging

__all__ = ["RunLogger", "configure_logging"]
