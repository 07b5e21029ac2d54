# mycare/log.py
import logging
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """
    Attach a single stdout handler to the package logger.
    Safe to call more than once (e.g. app reloads in tests).
    """
    logger = logging.getLogger("mycare")
    logger.setLevel(level.upper())

    if logger.handlers:
        return

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
