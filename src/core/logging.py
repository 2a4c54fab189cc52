import sys
from typing import Optional
from loguru import logger
import os

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(debug_mode: bool = False, log_dir: Optional[str] = None, quiet_level: str = "WARNING"):
    """
    Configures Loguru logger.

    Args:
        debug_mode: Log DEBUG and up to stderr instead of quiet_level and up
        log_dir: Directory for rotating log files; no file sink when None
        quiet_level: Console level when not in debug mode
    """
    # Remove default handler
    logger.remove()

    # Console Handler
    level = "DEBUG" if debug_mode else quiet_level
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT)

    # File Handler
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        logger.add(os.path.join(log_dir, "tagger_{time}.log"), rotation="10 MB", retention="1 week", level="DEBUG")

    logger.debug("Logging initialized.")
