# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

#src/nodezero/logging/log.py

from __future__ import annotations

import logging
import uuid
from pathlib import Path

LOG_FILENAME = ".nodezero.log"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(level: str) -> int:
    try:
        return _LEVELS[level.strip().lower()]
    except KeyError:
        raise ValueError(f"invalid log-level {level!r} (expected one of: debug, info, warn, error)") from None


def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "nodezero",
    level: int = logging.INFO,
) -> tuple[logging.Logger, str, Path | None]:
    """
    Initializes:
      - full DEBUG trace appended to <base_dir>/.nodezero.log
      - console (stderr) output at ``level``
      - returns run_id so every line of a run can be correlated
    """
    run_id = str(uuid.uuid4())

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    for h in list(logger.handlers):
        h.close()
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    log_path = None
    if base_dir is not None and base_dir.is_dir():
        log_path = base_dir / LOG_FILENAME
        # File = FULL TRACE
        fh = logging.FileHandler(log_path)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    # Console = INFO by default, whatever --log-level asks for otherwise
    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    logger.debug("=== nodezero run started ===")
    logger.debug(f"run_id={run_id}")
    logger.debug(f"log_file={log_path}")

    return logger, run_id, log_path
