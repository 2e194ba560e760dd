"""
Shared application logger.
"""

import logging

from timebox.core.config import get_settings

LOGGER_NAME = "timebox"


def setup_logger() -> logging.Logger:
    """Configure the application logger once and return it."""
    settings = get_settings()
    app_logger = logging.getLogger(LOGGER_NAME)
    if not app_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
        app_logger.addHandler(handler)
    app_logger.setLevel(settings.LOG_LEVEL.upper())
    return app_logger


logger = setup_logger()
