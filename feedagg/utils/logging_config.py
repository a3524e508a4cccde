"""Logging configuration for the feed aggregator."""

import logging
import sys

_HANDLER_NAME = "feedagg-console"


def setup_logging(level: str = "INFO") -> None:
    """
    Attach a console handler to the ``feedagg`` logger.

    Safe to call more than once; records still propagate to the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    app_logger = logging.getLogger("feedagg")
    app_logger.setLevel(log_level)

    if any(h.get_name() == _HANDLER_NAME for h in app_logger.handlers):
        return

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.set_name(_HANDLER_NAME)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    app_logger.addHandler(console_handler)
