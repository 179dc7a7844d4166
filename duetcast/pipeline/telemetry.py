"""Stage telemetry helper methods for the podcast pipeline.

Responsibilities:
- Report stage position (1-based index, total) to the progress callback.
- Emit stage start/complete/failure events with per-stage result context.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from ..telemetry.logger import RunLogger

_StageResult = TypeVar("_StageResult")


class PipelineTelemetryMixin:
    """Provide stage-telemetry helper methods."""

    _PHASE_SEQUENCE = ("transcript", "segment", "synthesize", "history")

    _run_logger: RunLogger | None
    _stage_progress_callback: Callable[[str, int, int], None] | None

    def _report_stage_progress(self, stage_name: str) -> None:
        if self._stage_progress_callback is None or stage_name not in self._PHASE_SEQUENCE:
            return
        self._stage_progress_callback(
            stage_name,
            self._PHASE_SEQUENCE.index(stage_name) + 1,
            len(self._PHASE_SEQUENCE),
        )

    def _run_stage(
        self,
        stage_name: str,
        action: Callable[[], _StageResult],
        describe: Callable[[_StageResult], Mapping[str, object]] | None = None,
    ) -> _StageResult:
        """Run one named stage; `describe` turns its result into log context.

        Failures are logged by exception type only, then re-raised unchanged.
        """

        self._report_stage_progress(stage_name)
        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage_name)
        try:
            result = action()
        except Exception as exc:
            if self._run_logger is not None:
                self._run_logger.log_stage_failure(stage_name, type(exc).__name__)
            raise
        if self._run_logger is not None:
            context = describe(result) if describe is not None else {}
            self._run_logger.log_stage_complete(stage_name, **context)
        return result
