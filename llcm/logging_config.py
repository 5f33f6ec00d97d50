"""
Logging setup for the lifecycle manager.

Application logs go to stderr through structlog so that stdout only carries
rendered output and apply lines.
"""

import logging
import sys
from typing import Dict, Optional, TextIO

import structlog

from llcm.errors import BadArgumentError

LOG_LEVELS: Dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_log_level(level: str) -> int:
    """Map a level name to its logging constant."""
    try:
        return LOG_LEVELS[level.lower()]
    except KeyError:
        raise BadArgumentError(f"unsupported log level: {level!r}") from None


def setup_logging(level: str = "info", stream: Optional[TextIO] = None) -> None:
    """
    Initialize stdlib logging and structlog.

    Args:
        level: One of debug, info, warn, warning, error.
        stream: Destination of log lines. Defaults to stderr.
    """
    numeric_level = parse_log_level(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(numeric_level)

    # botocore is chatty at debug; keep it one notch quieter than ours
    logging.getLogger("botocore").setLevel(max(numeric_level, logging.INFO))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
