"""Filesystem checks for CLI inputs."""

from pathlib import Path


def ensure_exists(path: Path, what: str) -> Path:
    """
    Return ``path`` if it names an existing file.

    Args:
        path: Path to check
        what: Description used in the error message (e.g. "import config")

    Raises:
        FileNotFoundError: If nothing exists at path
        IsADirectoryError: If path is a directory
    """
    if not path.exists():
        raise FileNotFoundError(f"Missing {what} at: {path}")
    if path.is_dir():
        raise IsADirectoryError(f"Expected a file for {what}, got a directory: {path}")
    return path
