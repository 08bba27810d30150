from __future__ import annotations

import logging
import sys
from typing import Union

_HANDLER_NAME = "taskboard.console"


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Handler:
    """
    Configure the root logger with one readable stderr handler.

    Safe to call more than once: only the handler installed by a previous
    call is replaced, handlers added by others (servers, test runners) stay.
    httpx request logging is limited to warnings.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        if h.get_name() == _HANDLER_NAME:
            root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.captureWarnings(True)
    return handler
