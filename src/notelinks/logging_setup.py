from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

APP_NAME = "notelinks"

_LEVELS = {-1: logging.ERROR, 0: logging.WARNING, 1: logging.INFO}


def level_for(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    return _LEVELS.get(max(verbosity, -1), logging.WARNING)


def setup_logging(verbosity: int = 0, log_file: Path | str | None = None) -> logging.Logger:
    """Configure the ``notelinks`` logger; calling it again replaces the handlers.

    Console output goes to stderr so it never mixes with a report on stdout.
    """
    logger = logging.getLogger(APP_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level_for(verbosity))
    ch.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(ch)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(path, maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    logger.debug("Logging initialized. level=%s log_file=%s", logging.getLevelName(ch.level), log_file)
    return logger
