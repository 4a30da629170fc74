"""Console logging setup"""
import logging
import sys

from colorama import Fore, Style, just_fix_windows_console

just_fix_windows_console()

LEVEL_COLORS = {
    logging.DEBUG: Fore.CYAN,
    logging.INFO: Fore.GREEN,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name"""

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelno, "")
        levelname = record.levelname
        record.levelname = f"{color}{levelname}{Style.RESET_ALL}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger with a single coloured console handler"""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColoredFormatter('%(asctime)s - %(levelname)s - %(name)s - %(message)s',
                                              datefmt='%H:%M:%S'))
        logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = False

    return logger


def set_level(level: int) -> None:
    """Change the level of every logger created through setup_logger"""
    for logger in logging.Logger.manager.loggerDict.values():
        if isinstance(logger, logging.Logger) and logger.name.startswith('cucumber_runner'):
            logger.setLevel(level)
