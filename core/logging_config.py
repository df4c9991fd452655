# core/logging_config.py
import logging

from core.config import settings

LOGGER_NAME = "renteasy"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Driver and hashing libraries log connection pool and backend chatter at INFO
NOISY_LOGGERS = ("pymongo", "passlib")


def resolve_level(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(resolve_level(settings.LOG_LEVEL))
    logger.propagate = False

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


logger = setup_logger()
