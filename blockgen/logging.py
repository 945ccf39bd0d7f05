"""Logger hierarchy shared by the generation pipeline, the CLI and the HTTP service.

Every component logs under ``blockgen.<component>``. Per-artifact outcomes go to
DEBUG, file writes and removals to INFO, and failed artifacts or records that
keep their previous outputs to WARNING.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "blockgen"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``blockgen.<name>``, e.g. ``get_logger("files.writer")``."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Attach handlers to the root ``blockgen`` logger.

    ``verbose`` lowers the level to DEBUG so each generator's outcome is shown;
    otherwise per-artifact DEBUG lines are suppressed. When
    ``log_file`` is given the same records are also appended there with
    timestamps, which is how long-running service processes keep an audit trail
    of generated files.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[blockgen] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
