"""Logging for the sync: everything to the log file, selected lines to the console."""

import logging
import os
import sys


LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


class EchoFilter(logging.Filter):
    """Pass records logged with extra={'echo': True}, and all warnings/errors."""

    def filter(self, record: logging.LogRecord) -> bool:
        return getattr(record, 'echo', False) or record.levelno >= logging.WARNING


def init_logging(log_path: str, debug: int = 0) -> logging.Logger:
    """Append to log_path and echo selected lines to stdout.

    Args:
        log_path: Full path of the log file (its directory is created).
        debug: 0 for normal logging, > 0 to include debug lines.

    Returns:
        The 'hr_results' logger.

    Raises:
        OSError: the log file can't be opened.
    """
    os.makedirs(os.path.dirname(os.path.abspath(log_path)), exist_ok=True)

    logger = logging.getLogger('hr_results')
    logger.setLevel(logging.DEBUG if debug > 0 else logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    file_handler = logging.FileHandler(log_path, mode='a')
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    console = logging.StreamHandler(sys.stdout)
    console.addFilter(EchoFilter())
    console.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(console)

    logger.propagate = False
    return logger
