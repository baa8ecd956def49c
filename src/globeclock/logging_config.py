"""Logging setup for the globeclock namespace. Called once by entry points."""

import logging
import sys
from typing import TextIO

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(level: int = logging.INFO, stream: TextIO | None = None) -> None:
    """Send ``globeclock.*`` records to one console stream.

    Logs go to stderr by default so the CLI's JSON on stdout stays parseable.
    Calling this again replaces the handler rather than adding a second one.
    """
    logger = logging.getLogger("globeclock")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
    logger.addHandler(handler)
