"""Coloured console logging for clustering and matrix lookups."""
import logging


class Colors:
    """ANSI color codes, one per log level."""
    GRAY = '\033[37m'
    CYAN = '\033[36m'
    YELLOW = '\033[33m'
    RED = '\033[31m'
    BOLD = '\033[1m'
    RESET = '\033[0m'


class Symbols:
    """Status prefixes used in log messages."""
    CHECK = '✓'
    CROSS = '✗'
    PIN = '📍'
    CLOCK = '⏱'


class SimpleFormatter(logging.Formatter):
    """Message text only, coloured by level."""
    LEVEL_COLORS = {
        logging.DEBUG: Colors.GRAY,
        logging.INFO: Colors.CYAN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.RED + Colors.BOLD,
    }

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno, Colors.RESET)
        return f"{color}{record.getMessage()}{Colors.RESET}"


def setup_logging(level: int = logging.INFO, stream=None) -> logging.Handler:
    """Replace the root logger's handlers with one coloured console handler."""
    logger = logging.getLogger()
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console = logging.StreamHandler(stream)
    console.setFormatter(SimpleFormatter())
    logger.addHandler(console)
    return console
