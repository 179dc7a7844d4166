"""Domain exceptions for pipeline, playback, and CLI diagnostics."""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class MissingCredentialError(PipelineStageError):
    """Raised before any network call when a required API key is absent."""

    def __init__(self, provider_id: str, *, hint: str | None = None) -> None:
        super().__init__(
            stage="credentials",
            detail=f"Missing API key for provider `{provider_id}`.",
            hint=hint,
        )
        self.provider_id = provider_id


class MissingInputError(PipelineStageError):
    """Raised when the podcast topic is empty."""

    def __init__(self, detail: str = "Podcast topic is empty.") -> None:
        super().__init__(
            stage="input",
            detail=detail,
            hint="Pass a non-empty topic, for example `duetcast generate \"Jazz history\"`.",
        )


class UpstreamFailureError(PipelineStageError):
    """Raised when the text-generation or speech service returns a failure.

    Attributes:
        status_code: Upstream HTTP status, when the failure had one.
        failure_kind: Normalized provider failure classification.
    """

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        status_code: int | None = None,
        failure_kind: str = "unknown",
        hint: str | None = None,
    ) -> None:
        super().__init__(stage=stage, detail=detail, hint=hint)
        self.status_code = status_code
        self.failure_kind = failure_kind


class PlaybackFailureError(PipelineStageError):
    """Raised when the audio sink cannot start or continue one segment."""

    def __init__(self, segment_index: int, detail: str) -> None:
        super().__init__(
            stage="playback",
            detail=f"Failed to play audio segment {segment_index + 1}: {detail}",
            hint="Try the play action again.",
        )
        self.segment_index = segment_index
