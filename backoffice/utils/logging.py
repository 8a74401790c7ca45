# backoffice/utils/logging.py
import logging
import sys

from backoffice.utils.settings import LOG_LEVEL

_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging():
    """
    Configures the root logger once for the API process and the Celery worker.

    Output goes to stdout so container runtimes pick it up. Chatty
    third-party loggers are raised to WARNING.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    logging.basicConfig(
        level=LOG_LEVEL,
        format=_LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("celery").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
