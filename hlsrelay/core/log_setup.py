"""
File logging for the pipeline.
One line per record: [timestamp] [LEVEL] message, appended to the log file.
"""

import logging
from pathlib import Path

from hlsrelay.core.constants import LOGGER_NAME, LOG_FORMAT, LOG_DATE_FORMAT

_HANDLER_ATTR = "_hlsrelay_handler"


def configure_logging(log_path: Path, verbose: bool = True) -> logging.Logger:
    """
    Attach a file handler to the package logger.

    With verbose off only WARNING and above are written, so milestones are
    suppressed but errors never are. Calling again replaces the handler.
    """
    log_path.parent.mkdir(parents=True, exist_ok=True)
    root = logging.getLogger(LOGGER_NAME)

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            root.removeHandler(handler)
            handler.close()

    handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)
    root.setLevel(logging.INFO if verbose else logging.WARNING)
    return root
