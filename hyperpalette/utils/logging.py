"""Logging setup for hyperpalette."""

import logging
import sys
from pathlib import Path
from typing import Optional

from hyperpalette.config.constants import DEFAULT_LOG_FILE

logger = logging.getLogger("hyperpalette")


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[Path] = None,
) -> None:
    """
    Set up structured logging for hyperpalette

    Args:
        verbose: Enable verbose (DEBUG) logging
        quiet: Disable INFO and WARNING logs to console
        log_file: Optional log file path (defaults to ~/.config/hyperpalette/hyperpalette.log)
    """
    if verbose:
        console_level = logging.DEBUG
    elif quiet:
        console_level = logging.ERROR
    else:
        console_level = logging.INFO

    detailed_formatter = logging.Formatter(
        '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s'
    )
    simple_formatter = logging.Formatter('%(levelname)s: %(message)s')

    logger.handlers.clear()
    logger.setLevel(logging.DEBUG)

    if not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(simple_formatter)
        logger.addHandler(console_handler)

    if log_file is None:
        log_file = DEFAULT_LOG_FILE

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)
    except (PermissionError, OSError) as e:
        # Continue with console logging only
        logger.debug(f"Could not create log file {log_file}: {e}")
