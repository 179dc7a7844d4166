"""Module entrypoint for running Duetcast as ``python -m duetcast``."""

from __future__ import annotations

from duetcast.cli import main


if __name__ == "__main__":
    main()
