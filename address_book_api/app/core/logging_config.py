"""
Logging configuration for the Address Book API.

``setup_logging`` attaches a console handler and, when ``LOG_FILE`` is
set, a file handler to the root logger.  Level and file default to
``settings.log_level`` and ``settings.log_file``.  In debug mode the
address service loggers are switched to ``DEBUG`` regardless of the
global level.  Logging is set up exactly once per process.
"""

import logging
from pathlib import Path
from typing import Optional

from .config import settings


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SERVICE_LOGGERS = ("address_book_api", "address_book_client")


def setup_logging(
    level: Optional[str] = None,
    logfile: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Configure the root logger (or ``logger``, if given).

    Parameters
    ----------
    level : Optional[str]
        Logging level name, case insensitive.  Defaults to
        ``settings.log_level``; unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Path of a log file.  Defaults to ``settings.log_file``; an empty
        value means console only.
    logger : Optional[logging.Logger]
        Logger to configure instead of the root logger.
    """
    logger = logger if logger is not None else logging.getLogger()
    if logger.handlers:
        # Already configured, e.g. by a second ``create_app`` call.
        return

    numeric_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logger.setLevel(numeric_level)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    logfile = logfile if logfile is not None else settings.log_file
    if logfile:
        file_handler = logging.FileHandler(Path(logfile).resolve(), encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if settings.debug:
        for name in SERVICE_LOGGERS:
            logging.getLogger(name).setLevel(logging.DEBUG)
