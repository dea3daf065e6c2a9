"""Run log attachment for a single provisioning invocation."""

import logging
import os
from typing import Optional

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class RunLog:
    """Appends timestamped lines to the run log while attached."""

    def __init__(self, path: str, logger: logging.Logger, level: int = logging.INFO):
        self.path = path
        self.logger = logger
        self.level = level
        self.handler: Optional[logging.FileHandler] = None

    def open(self):
        if self.handler is not None:
            return

        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        handler = logging.FileHandler(self.path, mode="a", encoding="utf-8")
        handler.setLevel(self.level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        self.logger.addHandler(handler)
        if self.logger.getEffectiveLevel() > self.level:
            self.logger.setLevel(self.level)
        self.handler = handler

    def close(self):
        if self.handler is None:
            return

        self.logger.removeHandler(self.handler)
        self.handler.close()
        self.handler = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
