"""Diagnostic logging for cmon."""

import logging
import sys

_LOGGER_NAME = "cmon"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """
    Send cmon diagnostics to stderr.

    Safe to call more than once; only the level changes on later calls.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    return logger
