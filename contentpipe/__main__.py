"""Module entrypoint for running contentpipe as ``python -m contentpipe``."""

from __future__ import annotations

from contentpipe.cli import main


if __name__ == "__main__":
    main()
