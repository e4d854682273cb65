"""Logging setup for the API process."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once at startup.

    Args:
        level: Level name from settings (DEBUG, INFO, WARNING, ...)
    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQL echo is controlled by the engine, keep the library logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
