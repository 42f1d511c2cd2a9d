from __future__ import annotations

import os
import sys
from typing import Optional

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO", enable_json: Optional[bool] = None) -> None:
    logger.remove()
    if enable_json is None:
        enable_json = bool(os.environ.get("K_SERVICE"))
    if enable_json:
        logger.add(sys.stderr, level=level.upper(), serialize=True, backtrace=False)
    else:
        logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT, colorize=None)
