import logging
import os

from .money import Cents, fmt_money


PACKAGE_LOGGER = "hhreplay"


def get_logger(name: str, level: int = logging.WARNING) -> logging.Logger:
    """Module logger; the shared package logger owns the handler and level."""
    root = logging.getLogger(PACKAGE_LOGGER)
    if not root.level:
        root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter('[%(levelname)s] %(name)s: %(message)s')
        handler.setFormatter(formatter)
        root.addHandler(handler)
    return logging.getLogger(name)


def setup_logger(name=None,
    log_file: str | None = None,
    level: int = logging.DEBUG,
    mode='a',
    console_handler = True,
    formatter_input: str = '[%(levelname)s] %(name)s: %(message)s'
) -> logging.Logger:
    """Configure a logger (the package root by default) for console and optional file output."""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear() # avoid duplicate handlers

    formatter = logging.Formatter(formatter_input)

    if console_handler:
        ch = logging.StreamHandler()
        ch.setFormatter(formatter)
        ch.setLevel(level)
        logger.addHandler(ch)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        fh = logging.FileHandler(log_file, mode=mode)
        fh.setFormatter(formatter)
        fh.setLevel(level)
        logger.addHandler(fh)

    return logger


def format_money_for_logging(cents: Cents) -> str:
    """
    Format cents for logging display.
    
    Args:
        cents: Integer cents
        
    Returns:
        Formatted string like "$1.25"
    """
    return fmt_money(cents)
