# ghmirror/core/logging_config.py
import logging
import sys

from ghmirror.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
HANDLER_NAME = "ghmirror-stdout"


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a single stdout handler to the ghmirror logger hierarchy.

    Safe to call more than once; the handler is only installed the first time.
    """
    logger = logging.getLogger("ghmirror")
    logger.setLevel((level or settings.MIRROR_LOG_LEVEL).upper())

    if not any(h.get_name() == HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
