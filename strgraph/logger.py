import logging

__all__ = [
    "get_main_logger",
]


def get_main_logger(level: int = logging.DEBUG) -> logging.Logger:
    logger = logging.getLogger("strgraph-main")
    logger.setLevel(level)
    return logger
