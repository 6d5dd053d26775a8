import logging
import sys
from typing import Optional


def setup_logging(name: str = "junapedia", level: int = logging.INFO) -> logging.Logger:
    """
    Sets up the package logger.

    Args:
        name: Name of the logger.
        level: Logging level (default: INFO).

    Returns:
        logging.Logger: Configured logger instance.
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers if already configured
    if logger.handlers:
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def set_level(level_name: Optional[str], name: str = "junapedia") -> None:
    """Adjusts the level of an already configured logger from a CLI flag."""
    if not level_name:
        return
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.getLogger(name).setLevel(level)


# Default logger for the project
logger = setup_logging()
