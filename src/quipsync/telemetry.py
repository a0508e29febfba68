"""
Loguru configuration for quipsync.

Every module logs through a bound logger so the console shows where a line
came from:

    from quipsync.telemetry import logger

    log = logger.bind(source="engine")
    log.info("Validated on attempt 1")

Format: TIME | LEVEL | SOURCE | MESSAGE
"""

import sys

from loguru import logger

# ANSI color codes for log sources
_ANSI_COLORS = {
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "green": "\033[32m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
    "white": "\033[37m",
    "bold": "\033[1m",
    "reset": "\033[0m",
}

# Source colors (by prefix)
_SOURCE_COLORS = {
    "engine": "green",
    "gateway": "magenta",
    "server": "bold",
    "store": "cyan",
    "extract": "blue",
    "cli": "yellow",
}

_configured = False


def _get_source_color_code(source: str) -> str:
    """Get ANSI color code for a log source based on its name prefix."""
    for prefix, color_name in _SOURCE_COLORS.items():
        if source.startswith(prefix):
            return _ANSI_COLORS.get(color_name, "")
    return _ANSI_COLORS["white"]


def _format_with_source(record):
    """Color the source and message based on where the line came from."""
    source = record["extra"].get("source", "")
    color = _get_source_color_code(source)
    reset = _ANSI_COLORS["reset"]
    record["extra"]["colored_source"] = f"{color}{source: <8}{reset}"
    record["extra"]["color"] = color
    record["extra"]["reset"] = reset
    return "<dim>{time:HH:mm:ss}</dim> | <level>{level: <7}</level> | {extra[colored_source]} | {extra[color]}{message}{extra[reset]}\n{exception}"


def _format_without_source(record):
    """Formatter for lines logged without a bound source."""
    return "<dim>{time:HH:mm:ss}</dim> | <level>{level: <7}</level> | {message}\n{exception}"


def setup_logging(level: str = "INFO", *, force: bool = False) -> None:
    """Install the stderr sinks once per process.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ...)
        force: Reinstall sinks even if already configured
    """
    global _configured
    if _configured and not force:
        return

    level = level.upper()
    logger.remove()
    logger.add(
        sys.stderr,
        format=_format_with_source,
        level=level,
        filter=lambda record: "source" in record["extra"],
        colorize=True,
    )
    logger.add(
        sys.stderr,
        format=_format_without_source,
        level=level,
        filter=lambda record: "source" not in record["extra"],
        colorize=True,
    )
    _configured = True


def truncate(text: str, limit: int = 800) -> str:
    """Clip text to at most `limit` characters for log lines and error details."""
    if text is None:
        return ""
    return str(text)[:limit]


__all__ = ["logger", "setup_logging", "truncate"]
