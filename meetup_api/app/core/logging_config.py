"""
Logging setup shared by the API server and the operator scripts.

Everything logs through the standard ``logging`` module under the
module's ``__name__``.  ``setup_logging`` runs once per process and
attaches handlers to the root logger unless told otherwise.
"""

import logging
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Per-request access lines; only shown at DEBUG.
CHATTY_LOGGERS = ("uvicorn.access",)


def _handlers(logfile: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    return handlers


def setup_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    target: Optional[logging.Logger] = None,
) -> None:
    """Attach console (and optionally file) handlers to ``target``.

    ``target`` defaults to the root logger.  Nothing happens when it
    already has handlers, so repeated ``create_app`` calls and pytest's
    capture handlers are left alone.  Unknown level names mean ``INFO``.
    """
    logger = target if target is not None else logging.getLogger()
    if logger.handlers:
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(numeric_level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in _handlers(logfile):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if numeric_level > logging.DEBUG:
        for name in CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
