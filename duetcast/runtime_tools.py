"""External player executable resolution.

Resolution order for a tool name such as `ffplay`:
1. Bundled app directories (`./bin/<tool>` then `./<tool>` from app root).
2. System `PATH`.
3. Raw command name, so `subprocess` raises its native missing-binary error.
"""

from __future__ import annotations

from pathlib import Path
import shutil
import sys


def resolve_executable(command_name: str) -> str:
    """Resolve an executable with bundled-first precedence, then PATH."""

    normalized = command_name.strip()
    if not normalized:
        return command_name

    for candidate in _bundled_candidates(normalized):
        if candidate.is_file():
            return str(candidate)

    return shutil.which(normalized) or normalized


def _bundled_candidates(command_name: str) -> list[Path]:
    app_root = _app_root()
    names = [command_name]
    if not command_name.lower().endswith(".exe"):
        names.append(f"{command_name}.exe")
    return [directory / name for name in names for directory in (app_root / "bin", app_root)]


def _app_root() -> Path:
    """Resolve runtime application root for frozen and non-frozen execution."""

    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]
