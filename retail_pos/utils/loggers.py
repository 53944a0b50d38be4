import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name="retail_pos", level=logging.INFO, stream=None):
    """
    Package logger with a single stream handler (stderr unless `stream` is given).
    Module loggers (logging.getLogger(__name__)) propagate into it.
    Calling again only adjusts the level.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
