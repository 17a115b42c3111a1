"""structlog setup for the Snang case core.

Modules log through ``structlog.get_logger()``; this only decides the
level and the renderer. Nothing in the package logs salary figures,
document confidence values or TAC codes.
"""

import logging
from typing import Optional

import structlog

from .config import SnangConfig


def configure_logging(config: Optional[SnangConfig] = None) -> None:
    """Configure structlog from the root configuration.

    Args:
        config: Root configuration (default: loaded from environment)
    """
    config = config or SnangConfig()
    level = logging.getLevelName(config.log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if config.log_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
