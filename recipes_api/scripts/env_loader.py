"""Loading of environment variables from a ``.env`` file."""
from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv


def load_dotenv_file(path: str | Path | None = None, *, override: bool = False) -> bool:
    """Load variables from *path*, defaulting to ``.env`` at the project root.

    Returns ``False`` when the file does not exist or defines nothing.
    """

    dotenv_path: str | Path | None = path
    if dotenv_path is None:
        project_root = Path(__file__).resolve().parents[2]
        dotenv_path = project_root / ".env"

    return load_dotenv(dotenv_path=dotenv_path, override=override)
