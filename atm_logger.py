import logging

from atm_config import LOG_FILE, LOG_LEVEL

LOGGER_NAME = "atm"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name=None):
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)


def setup_logging(log_file=LOG_FILE, level=LOG_LEVEL):
    """
    Point the diagnostic log at an append-only file.

    Safe to call more than once: the previous file handler is closed and
    replaced instead of stacking a second one.
    """
    logger = get_logger()

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)

    # keep log lines out of the prompt stream
    logger.propagate = False
    return logger


def shutdown_logging():
    logger = get_logger()
    for handler in list(logger.handlers):
        handler.flush()
        handler.close()
        logger.removeHandler(handler)
