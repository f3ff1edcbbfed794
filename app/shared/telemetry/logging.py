"""Logging configuration for the application and its workers."""

import logging
import sys

from app.core.config import get_settings

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
# Client libraries that log every request at INFO.
_NOISY_LOGGERS = ("botocore", "boto3", "urllib3", "opensearch")


def setup_logging(level: int | None = None) -> None:
    """Configure root logging to stdout.

    Level is DEBUG when settings.debug is True, otherwise INFO, unless given.
    Chatty client libraries are capped at WARNING.
    """
    if level is None:
        level = logging.DEBUG if get_settings().debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
