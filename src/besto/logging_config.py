"""Logging setup shared by the CLI and the HTTP server."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_level(raw_level: str | int | None, default: int = logging.WARNING) -> int:
    """Turn a level name like "info" into a logging constant."""
    if raw_level is None:
        return default
    if isinstance(raw_level, int):
        return raw_level
    level = logging.getLevelName(raw_level.strip().upper())
    return level if isinstance(level, int) else default


def configure_logging(level: str | int | None = None) -> None:
    """Configure root logging once. Later calls only adjust the level."""
    resolved = resolve_level(level)
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(resolved)
        return
    logging.basicConfig(format=LOG_FORMAT, level=resolved)
