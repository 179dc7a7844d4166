"""Duetcast pipeline package.

This package contains the ordered task queue, stage telemetry, and the
topic-to-audio orchestration and session modules.
"""

from .queue import SequentialTaskQueue

__all__ = ["SequentialTaskQueue"]
