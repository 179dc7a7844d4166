"""Structured run logging on top of `loguru`.

Every pipeline event is one line:

    [phase] level=INFO stage=synthesize event=complete run_id=... segments=8

Context keys are sorted and values are reduced to shell-safe tokens, so the
lines stay grep-able and never carry provider payloads or secrets verbatim.
"""

from __future__ import annotations

import re
import sys
from typing import TextIO

from loguru import logger

_UNSAFE_CHARACTERS = re.compile(r"[^\w.:/-]")


def configure_logging(sink: TextIO | None = None, level: str = "INFO") -> None:
    """Route `loguru` output to `sink` (stderr by default) with a message-only format."""

    logger.remove()
    logger.add(sink or sys.stderr, format="{message}", level=level, colorize=False)


def format_fields(context: dict[str, object]) -> str:
    """Render `key=value` pairs in key order, each value as one safe token."""

    fields = []
    for key in sorted(context):
        token = _UNSAFE_CHARACTERS.sub("_", str(context[key]).strip()) or "none"
        fields.append(f"{key}={token}")
    return " ".join(fields)


class RunLogger:
    """Emit `[phase]` lines for CLI-observable pipeline activity."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        configure_logging(sink, level)

    def _emit(self, level: str, stage: str, event: str, context: dict[str, object]) -> None:
        line = f"[phase] level={level} stage={stage} event={event}"
        fields = format_fields(context)
        logger.log(level, f"{line} {fields}" if fields else line)

    def log_stage_start(self, stage: str, **context: object) -> None:
        self._emit("INFO", stage, "start", context)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        self._emit("INFO", stage, "complete", context)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Log a failed stage by exception type only."""

        self._emit("ERROR", stage, "failure", {"error_type": error_type})
