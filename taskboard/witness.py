"""
Task Witness — Logging for the Taskboard service
==================================================
Pure observation. Logs what the store and router did, never
modifies task data or control flow.

    setup_logging()  — Configure the root logger once, at startup
    TaskWitness      — Records store actions and request errors
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Optional, Union

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure the root logger with a single stderr handler.

    Call once, before the server starts. Replaces existing handlers so
    repeated calls do not duplicate output.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
    logging.captureWarnings(True)


class TaskWitness:
    """Witnesses store actions and request errors.

    Must NEVER raise: a failure to log is itself swallowed so that
    observation can never break a request.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("taskboard.witness")

    def log_action(self, action: str, details: dict[str, Any]) -> None:
        """𓂀 Witnesses a store action."""
        try:
            self.logger.info("%s %s", action, json.dumps(details, default=str, sort_keys=True))
        except Exception:
            pass

    def log_error(self, status_code: int, message: str, path: str = "") -> None:
        """𓂀 Witnesses a request-local error."""
        try:
            self.logger.warning("%d %s %s", status_code, path, message)
        except Exception:
            pass
