"""Command-line interface for Duetcast.

Responsibilities:
- Expose user-facing commands for generation, history, and playback.
- Convert CLI arguments into `DuetcastConfig` and run the pipeline.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
import os
from pathlib import Path
import queue
import threading
from typing import Annotated

import typer

from .cli_rendering import (
    echo_history_list,
    echo_podcast,
    echo_segment_rows,
    exit_with_command_error,
    segment_preview,
    speaker_label,
)
from .cli_runtime import prompt_for_api_key, resolve_provider_runtime_sources
from .config import ConfigLoader, DuetcastConfig, RuntimeConfigSources
from .credentials import SUPPORTED_CREDENTIAL_PROVIDERS, create_credential_store
from .errors import PipelineStageError
from .models.datatypes import SPEED_OPTIONS
from .parsing import parse_speed
from .pipeline.orchestrator import PodcastPipeline
from .pipeline.session import PodcastSession
from .playback.controller import PlaybackController, PlaybackStatus
from .playback.sink import FfplayAudioSink
from .telemetry.logger import RunLogger, configure_logging

app = typer.Typer(
    name="duetcast",
    no_args_is_help=True,
    help="Turn a topic into a two-voice podcast.",
)
credentials_app = typer.Typer(help="Manage stored provider API keys.", no_args_is_help=True)
app.add_typer(credentials_app, name="credentials")

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="YAML config file.", dir_okay=False),
]
DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", help="Directory for audio files and history."),
]

_STATUS_POLL_SECONDS = 0.1


class StageProgressIndicator:
    """Render per-stage progress lines for long-running commands."""

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str) -> None:
        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        """Print one progress line for a stage start transition."""

        spinner = self._SPINNER_FRAMES[(stage_index - 1) % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{spinner} {stage_index}/{stage_total} stage={stage_name}"
        )


def _load_base_config(config_file: Path | None, data_dir: Path | None) -> DuetcastConfig:
    """Load YAML or environment config and map failures to stage errors."""

    try:
        if config_file is not None:
            config = ConfigLoader.from_yaml(config_file)
        else:
            config = ConfigLoader.from_env()
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_file}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid configuration: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    if data_dir is not None:
        config = replace(config, data_dir=data_dir)
    return config


def _build_pipeline(config: DuetcastConfig, run_logger: RunLogger | None = None) -> PodcastPipeline:
    try:
        return PodcastPipeline(config, run_logger=run_logger)
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid configuration: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


@app.command("generate")
def generate_command(
    topic: Annotated[str, typer.Argument(help="Podcast topic or prompt.")],
    config_file: ConfigOption = None,
    data_dir: DataDirOption = None,
    provider_transcript: Annotated[
        str | None, typer.Option(help="Transcript provider (`gemini` or `openai`).")
    ] = None,
    model_transcript: Annotated[str | None, typer.Option(help="Transcript model id.")] = None,
    model_tts: Annotated[str | None, typer.Option(help="Speech model id.")] = None,
    host_voice: Annotated[str | None, typer.Option(help="Voice id for the host.")] = None,
    guest_voice: Annotated[str | None, typer.Option(help="Voice id for the guest.")] = None,
    thinking: Annotated[
        bool | None, typer.Option("--thinking/--no-thinking", help="Model thinking.")
    ] = None,
    web_search: Annotated[
        bool | None, typer.Option("--web-search/--no-web-search", help="Search grounding.")
    ] = None,
    gemini_api_key: Annotated[str | None, typer.Option(help="Gemini API key.")] = None,
    openai_api_key: Annotated[str | None, typer.Option(help="OpenAI API key.")] = None,
    prompt_api_key: Annotated[
        bool, typer.Option("--prompt-api-key", help="Prompt for missing API keys.")
    ] = False,
    store_api_key: Annotated[
        bool, typer.Option("--store-api-key", help="Persist entered API keys in keyring.")
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="Debug logging.")] = False,
) -> None:
    """Generate a transcript, synthesize both voices, and store the podcast."""

    try:
        config = _load_base_config(config_file, data_dir)
        runtime_cli_values, runtime_secure_values = resolve_provider_runtime_sources(
            provider_transcript=provider_transcript,
            model_transcript=model_transcript,
            model_tts=model_tts,
            host_voice=host_voice,
            guest_voice=guest_voice,
            api_keys={"gemini": gemini_api_key, "openai": openai_api_key},
            prompt_api_key=prompt_api_key,
            store_api_key=store_api_key,
        )
        config = replace(
            config,
            enable_thinking=config.enable_thinking if thinking is None else thinking,
            enable_web_search=config.enable_web_search if web_search is None else web_search,
            runtime_sources=RuntimeConfigSources(
                cli=runtime_cli_values,
                secure=runtime_secure_values,
                env=os.environ,
            ),
        )
        pipeline = PodcastPipeline(
            config,
            run_logger=RunLogger(level="DEBUG" if verbose else "INFO"),
            stage_progress_callback=StageProgressIndicator("generate").on_stage_start,
        )
        run = pipeline.run(topic)
    except Exception as exc:
        exit_with_command_error("generate", exc)

    typer.echo(f"Topic: {run.topic}")
    typer.echo(f"Segments: {len(run.segments)}")
    if not run.segments:
        typer.echo("No Host/Guest lines were found in the transcript; nothing to play.")
    echo_segment_rows(run.segments)
    typer.echo(f"History id: {run.history_id}")


@app.command("history")
def history_command(
    config_file: ConfigOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """List stored podcasts, newest first."""

    try:
        pipeline = _build_pipeline(_load_base_config(config_file, data_dir))
        entries = pipeline.history.list()
    except Exception as exc:
        exit_with_command_error("history", exc)
    echo_history_list(entries)


@app.command("show")
def show_command(
    podcast_id: Annotated[str, typer.Argument(help="History id.")],
    config_file: ConfigOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Print the transcript and segments of one stored podcast."""

    try:
        pipeline = _build_pipeline(_load_base_config(config_file, data_dir))
        podcast = pipeline.history.load(podcast_id)
        if podcast is None:
            raise PipelineStageError(
                stage="history",
                detail=f"No stored podcast with id `{podcast_id}`.",
                hint="Run `duetcast history` to list stored ids.",
            )
    except Exception as exc:
        exit_with_command_error("show", exc)
    echo_podcast(podcast)


@app.command("clear-history")
def clear_history_command(
    config_file: ConfigOption = None,
    data_dir: DataDirOption = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation.")] = False,
) -> None:
    """Delete every stored podcast and its audio."""

    if not yes:
        typer.confirm("Delete all stored podcasts?", abort=True)
    try:
        pipeline = _build_pipeline(_load_base_config(config_file, data_dir))
        pipeline.history.clear()
    except Exception as exc:
        exit_with_command_error("clear-history", exc)
    typer.echo("History cleared.")


def _echo_now_playing(controller: PlaybackController) -> None:
    state = controller.state
    segment = controller.current_segment
    line = f"[{state.status.value}] {state.current_index + 1}/{state.segment_count} {state.speed:g}x"
    if segment is not None:
        line = f"{line} {speaker_label(segment.speaker)}: {segment_preview(segment)}"
    typer.echo(line)


def _handle_play_command(controller: PlaybackController, command: str) -> bool:
    """Apply one interactive command; return `False` to leave the loop."""

    action, _, argument = command.strip().partition(" ")
    if action == "q":
        return False
    if action == "p":
        if controller.status is PlaybackStatus.PLAYING:
            controller.pause()
        else:
            controller.play()
    elif action == "n":
        controller.skip()
    elif action == "s":
        controller.set_speed(parse_speed(argument, SPEED_OPTIONS))
    elif action:
        typer.echo("Commands: p (play/pause), n (next), s <speed>, q (quit)")
    return True


def _read_play_commands(commands: queue.Queue[str | None]) -> None:
    """Forward interactive commands until `q`; end of input is queued as `None`."""

    while True:
        try:
            command = typer.prompt("p/n/s <speed>/q", default="", show_default=False)
        except typer.Abort:
            commands.put(None)
            return
        commands.put(command)
        if command.strip() == "q":
            return


@app.command("play")
def play_command(
    podcast_id: Annotated[str, typer.Argument(help="History id.")],
    speed: Annotated[str, typer.Option(help="Playback speed, e.g. 1.25.")] = "1",
    config_file: ConfigOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Play a stored podcast; starts on Enter and returns after the last segment."""

    try:
        pipeline = _build_pipeline(_load_base_config(config_file, data_dir))
        configure_logging(level="WARNING")
        controller = PlaybackController(FfplayAudioSink(), speed=parse_speed(speed, SPEED_OPTIONS))
        session = PodcastSession(pipeline, controller)
        podcast = session.load_from_history(podcast_id)
        if podcast is None:
            raise PipelineStageError(
                stage="history",
                detail=f"No stored podcast with id `{podcast_id}`.",
                hint="Run `duetcast history` to list stored ids.",
            )
    except Exception as exc:
        exit_with_command_error("play", exc)

    if not podcast.segments:
        typer.echo("This podcast has no audio segments.")
        return

    typer.echo(f"Topic: {podcast.topic}")
    typer.prompt("Press Enter to start playback", default="", show_default=False)
    try:
        controller.play()
        commands: queue.Queue[str | None] = queue.Queue()
        threading.Thread(
            target=_read_play_commands,
            args=(commands,),
            name="duetcast-play-input",
            daemon=True,
        ).start()
        _echo_now_playing(controller)
        while controller.status is not PlaybackStatus.ENDED:
            try:
                command = commands.get(timeout=_STATUS_POLL_SECONDS)
            except queue.Empty:
                continue
            if command is None:
                break
            try:
                if not _handle_play_command(controller, command):
                    break
            except ValueError as exc:
                typer.secho(str(exc), fg=typer.colors.YELLOW, err=True)
            _echo_now_playing(controller)
        if controller.status is PlaybackStatus.ENDED:
            _echo_now_playing(controller)
    except PipelineStageError as exc:
        controller.reset()
        exit_with_command_error("play", exc)
    controller.reset()


@credentials_app.command("set")
def credentials_set_command(
    provider_id: Annotated[str, typer.Argument(help="Provider: gemini or openai.")],
) -> None:
    """Store a provider API key in secure credential storage."""

    try:
        if provider_id not in SUPPORTED_CREDENTIAL_PROVIDERS:
            raise PipelineStageError(
                stage="credentials",
                detail=f"Unsupported provider `{provider_id}`.",
                hint=f"Use one of: {', '.join(SUPPORTED_CREDENTIAL_PROVIDERS)}.",
            )
        api_key = prompt_for_api_key(provider_id)
        if api_key is None:
            typer.echo("No API key entered; nothing stored.")
            return
        create_credential_store().set_api_key(provider_id, api_key)
    except Exception as exc:
        exit_with_command_error("credentials set", exc)
    typer.echo(f"Stored {provider_id} API key in secure credential storage.")


@credentials_app.command("clear")
def credentials_clear_command(
    provider_id: Annotated[str, typer.Argument(help="Provider: gemini or openai.")],
) -> None:
    """Remove a stored provider API key."""

    try:
        removed = create_credential_store().clear_api_key(provider_id)
    except Exception as exc:
        exit_with_command_error("credentials clear", exc)
    if removed:
        typer.echo(f"Removed stored {provider_id} API key.")
    else:
        typer.echo(f"No stored {provider_id} API key found.")


def main() -> None:
    """Run the Duetcast CLI."""

    app()


if __name__ == "__main__":
    main()
