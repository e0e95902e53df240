"""Default log sink for hosts that have none of their own.

The heartbeat modules only emit records; nothing here runs on import.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Marks handlers installed here so repeated calls don't stack them
_HANDLER_TAG = "_uptime_heartbeat_handler"


def setup_logging(
    name: str = "heartbeat",
    level: int = logging.INFO,
    log_dir: Path | None = None,
) -> None:
    """Configure the root logger to write to the console and optionally a file.

    Args:
        name: Log file name without extension, used when `log_dir` is set.
        level: Logging level (default INFO).
        log_dir: Directory for `<name>.log`. Console only when None.
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    root_logger = logging.getLogger()

    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root_logger.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / f"{name}.log"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        setattr(handler, _HANDLER_TAG, True)
        root_logger.addHandler(handler)

    root_logger.setLevel(level)

    # aiohttp is chatty at DEBUG
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
