# spacetime/utils/log.py
from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> int:
    """Root logging for a host process; the library itself never calls basicConfig on import."""
    name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger("spacetime").setLevel(numeric)
    return numeric


__all__ = ["configure_logging", "LOG_FORMAT"]
