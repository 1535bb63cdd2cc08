"""Logging setup for the API process."""
from __future__ import annotations

import logging
import os
from pathlib import Path

_NOISY_LOGGERS = ("urllib3", "httpx", "sentence_transformers")


def setup_logging(level_name: str | None = None, log_file: str | None = None) -> None:
    """Configure the root logger once.

    Logs go to the console and, unless ``TENANTSEARCH_LOG_FILE`` is set to an
    empty string, to a file as well.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    level_name = (level_name or os.getenv("TENANTSEARCH_LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    if log_file is None:
        log_file = os.getenv("TENANTSEARCH_LOG_FILE", "tenantsearch.log")

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    root_logger.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
