"""Loguru setup shared by the API and the CLI.

Console output is for people. The optional file sink rotates, and can write
one JSON object per line when LOG_JSON is set, so a log shipper can pick up
the bracketed component tags ([PLAN], [COMPLETE], ...) as plain fields.
"""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"

_active_config: tuple | None = None


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    *,
    json_file: bool = False,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Send logs to stderr and, optionally, to a rotating file.

    Repeated calls with the same arguments keep the existing sinks, so
    building several apps in one process does not duplicate output.

    Args:
        level: Minimum level for every sink
        log_file: Path of the file sink; None disables it
        json_file: Write the file sink as JSON lines instead of text
        rotation: When to start a new file (e.g. "10 MB", "1 day")
        retention: How long rotated files are kept
    """
    global _active_config
    config = (level, log_file, json_file, rotation, retention)
    if config == _active_config:
        return

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=sys.stderr.isatty())

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            path,
            format=FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            serialize=json_file,
            backtrace=True,
            diagnose=False,
        )

    _active_config = config
    logger.debug(f"Logging configured: level={level}, file={log_file or '-'}, json={json_file}")
