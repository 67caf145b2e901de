"""Logging setup for the API process and scripts."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once; later calls only adjust the level."""
    root = logging.getLogger()
    log_level = getattr(logging, level.upper(), logging.INFO)
    if not root.handlers:
        logging.basicConfig(level=log_level, format=LOG_FORMAT)
    root.setLevel(log_level)
    # SQL echo is controlled by the engine; keep the driver loggers quiet
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
