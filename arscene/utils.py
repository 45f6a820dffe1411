"""Shared utilities for AR Scene."""

import logging
from pathlib import Path
from typing import Union

from rich.console import Console
from rich.logging import RichHandler

# Log records go to stderr so command output stays machine-readable
console = Console(stderr=True)


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Set up logging with Rich handler."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    return logging.getLogger("arscene")


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module."""
    return logging.getLogger(f"arscene.{name}")


def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure a directory exists and return the Path."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_filename(name: str, max_length: int = 64) -> str:
    """Convert a string to a safe filename."""
    # Replace problematic characters
    safe = "".join(c if c.isalnum() or c in "-_." else "_" for c in name)
    # Remove consecutive underscores
    while "__" in safe:
        safe = safe.replace("__", "_")
    # Trim
    return safe[:max_length].strip("_")
