import logging
from functools import lru_cache

LOGGER_NAME = "container-identity"


@lru_cache(maxsize=None)
def get_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.addHandler(logging.NullHandler())
    return logger
