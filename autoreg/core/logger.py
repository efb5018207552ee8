"""Loguru sinks for the engine, the API and the CLI.

Records carry a ``component`` extra naming the process that configured
logging (``api`` for the server, ``cli`` for the command line).
"""

import sys
from pathlib import Path

from loguru import logger

from autoreg.config.settings import Settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> <level>{level: <7}</level> "
    "<magenta>[{extra[component]}]</magenta> <cyan>{name}</cyan> {message}"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS ZZ} {level: <7} [{extra[component]}] {name}:{line} {message}"


def configure_logging(settings: Settings, component: str, level: str | None = None) -> None:
    """Replace loguru's default sink with the configured ones.

    Args:
        settings: Source of log file path, rotation, retention and format
        component: Value of the ``component`` extra on every record
        level: Overrides ``settings.log_level`` (the CLI ``--log-level`` flag)
    """
    level = (level or settings.log_level).upper()
    logger.remove()
    logger.configure(extra={"component": component})
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        # serialize writes one JSON object per record and ignores the format
        logger.add(
            log_path,
            format=FILE_FORMAT,
            level=level,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            serialize=settings.log_json,
            enqueue=True,
        )

    logger.debug(f"Logging configured (level={level}, file={settings.log_file or '-'})")
