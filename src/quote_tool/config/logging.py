"""Logging setup shared by the API and the Streamlit UI."""
import logging
import sys
from typing import Optional

_LOGGING_CONFIGURED = False


def setup_logging(name: str = "quote_tool", level: Optional[str] = None) -> logging.Logger:
    """Configure console logging once and return the package logger."""
    global _LOGGING_CONFIGURED

    logger = logging.getLogger(name)
    if _LOGGING_CONFIGURED:
        return logger

    if level is None:
        from .settings import get_settings
        level = get_settings().log_level

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    _LOGGING_CONFIGURED = True
    return logger
