"""Logging for billing runs.

Every run logs to stdout and appends to the audit file named by LOG_FILE, so
each derrama and invoice batch computed leaves a trace. The level comes from
LOG_LEVEL, validated by load_config().
"""

import logging
import sys
from pathlib import Path

from waterbill.services.config import BillingConfig

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(config: BillingConfig) -> logging.Logger:
    """Route all loggers to stdout and the run's audit file.

    Handlers installed by an earlier call are closed and replaced, so
    repeated runs in one process do not duplicate output.

    Returns:
        The "waterbill" logger
    """
    log_path = Path(config.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handlers = [
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(log_path, encoding="utf-8"),
    ]
    for handler in handlers:
        handler.setLevel(config.log_level)

    logging.basicConfig(
        level=config.log_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    logger = logging.getLogger("waterbill")
    logger.debug("Logging to stdout and %s at %s", log_path, config.log_level)
    return logger


__all__ = ["LOG_DATE_FORMAT", "LOG_FORMAT", "setup_logging"]
