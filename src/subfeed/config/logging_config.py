"""
Logging setup for subfeed.

The browse surface owns the terminal, so log records go to a file under
``logs_dir``. Verbose mode also mirrors records to stderr.
"""

from __future__ import annotations

import logging
from pathlib import Path

from subfeed.config.settings import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(settings: Settings, verbose: bool = False) -> Path | None:
    """
    Attach file (and optionally console) handlers to the ``subfeed`` logger.

    Parameters
    ----------
    settings : Settings
        Application settings providing ``logs_dir`` and ``log_level``.
    verbose : bool, optional
        If True, log at DEBUG and mirror records to stderr (default False).

    Returns
    -------
    Path | None
        Path of the log file, or None when the logs directory is unwritable.
    """
    log_level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger("subfeed")
    root_logger.setLevel(log_level)

    # Re-configuring (e.g. repeated CLI invocations in tests) must not stack handlers
    for handler in list(root_logger.handlers):
        if getattr(handler, "_subfeed_handler", False):
            root_logger.removeHandler(handler)
            handler.close()

    log_file: Path | None = settings.logs_dir / "subfeed.log"
    try:
        settings.logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        file_handler._subfeed_handler = True  # type: ignore[attr-defined]
        root_logger.addHandler(file_handler)
    except OSError:
        log_file = None

    if verbose:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(formatter)
        console_handler._subfeed_handler = True  # type: ignore[attr-defined]
        root_logger.addHandler(console_handler)

    return log_file
