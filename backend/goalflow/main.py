"""Process bootstrap for hosts that embed the goal planner."""
from __future__ import annotations

import logging

from goalflow.core.config import settings
from goalflow.core.logging import configure_logging
from goalflow.observability.client import init_opik

logger = logging.getLogger(__name__)


def startup() -> None:
    """Configure logging and observability once, before the first interview runs."""
    configure_logging(log_level=settings.log_level)
    client = init_opik()
    logger.info("%s started (opik=%s)", settings.app_name, "on" if client else "off")
