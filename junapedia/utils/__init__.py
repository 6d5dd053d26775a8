"""
Shared helpers: logging and text normalization.
"""

from .logging_config import logger, setup_logging
from .normalization import normalize_text, normalize_for_key, compact, token_form, title_case

__all__ = [
    "logger",
    "setup_logging",
    "normalize_text",
    "normalize_for_key",
    "compact",
    "token_form",
    "title_case",
]
