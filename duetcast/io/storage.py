"""Audio artifact storage.

Responsibilities:
- Persist synthesized audio payloads under one root directory.
- Release (delete) audio files once no run or history entry references them.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger


class AudioStore:
    """Filesystem-backed store for segment audio files."""

    def __init__(self, root: Path) -> None:
        """Initialize the store with a root audio directory."""

        self.root = root

    def save_audio(self, relative_path: Path, data: bytes) -> Path:
        """Save audio bytes and return final path."""

        path = self.root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def exists(self, path: Path) -> bool:
        """Return whether the given audio file exists."""

        return path.is_file()

    def release(self, path: Path) -> bool:
        """Delete an audio file owned by this store and report if it existed.

        Paths outside the store root are left untouched. Empty run
        directories are removed together with their last file.
        """

        resolved = path.resolve()
        root = self.root.resolve()
        if root not in resolved.parents:
            logger.warning("Refusing to release audio outside store root: {}", path)
            return False
        if not resolved.is_file():
            return False
        resolved.unlink()
        parent = resolved.parent
        if parent != root and not any(parent.iterdir()):
            parent.rmdir()
        return True
