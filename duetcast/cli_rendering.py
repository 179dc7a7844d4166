"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
history rows, transcripts, and segment listings.
"""

from __future__ import annotations

from datetime import datetime
from typing import NoReturn, Sequence

import typer

from .errors import PipelineStageError, UpstreamFailureError
from .models.datatypes import Segment, Speaker, StoredPodcast

_SEGMENT_PREVIEW_CHARS = 150


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        status = ""
        if isinstance(exc, UpstreamFailureError) and exc.status_code:
            status = f" [HTTP {exc.status_code}]"
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`{status}: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def speaker_label(speaker: Speaker) -> str:
    return "Host" if speaker is Speaker.HOST else "Guest"


def segment_preview(segment: Segment) -> str:
    """Return a single-line preview of a segment's text."""

    text = " ".join(segment.text.split())
    if len(text) <= _SEGMENT_PREVIEW_CHARS:
        return text
    return f"{text[:_SEGMENT_PREVIEW_CHARS]}..."


def format_created_at(created_at: float) -> str:
    return datetime.fromtimestamp(created_at).strftime("%Y-%m-%d %H:%M")


def echo_segment_rows(segments: Sequence[Segment]) -> None:
    """Print one numbered row per segment."""

    total = len(segments)
    for index, segment in enumerate(segments, start=1):
        typer.echo(f"{index}/{total} {speaker_label(segment.speaker)}: {segment_preview(segment)}")


def echo_history_list(entries: Sequence[StoredPodcast]) -> None:
    """Print newest-first history rows or an empty-history notice."""

    if not entries:
        typer.echo("No podcasts generated yet.")
        return
    for entry in entries:
        typer.echo(
            f"{entry.id}  {format_created_at(entry.created_at)}  "
            f"{len(entry.segments)} segments  {entry.topic}"
        )


def echo_podcast(podcast: StoredPodcast) -> None:
    """Print a stored podcast's metadata, transcript, and segments."""

    typer.echo(f"Topic: {podcast.topic}")
    typer.echo(f"Created: {format_created_at(podcast.created_at)}")
    typer.echo("")
    typer.echo(podcast.transcript)
    typer.echo("")
    echo_segment_rows(podcast.segments)
