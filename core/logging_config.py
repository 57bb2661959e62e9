# core/logging_config.py
import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME = "sindico"


def setup_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)

    # Avoid duplicate handlers in dev reload
    if logger.handlers:
        return logger

    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream_handler)

    # Keep records out of the root logger (uvicorn installs its own handlers)
    logger.propagate = False

    return logger


def get_logger(component: str) -> logging.Logger:
    """Child logger, e.g. get_logger("scheduler") -> "sindico.scheduler"."""
    return logger.getChild(component)


logger = setup_logger()
