# cafe/utils/logging.py
import logging
import sys

from cafe.utils.settings import LOG_FILE, LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging():
    """
    Konfiguracja globalnego loggera, wywolywana raz przy starcie aplikacji.

    - poziom z LOG_LEVEL (domyslnie INFO)
    - stdout (docker) + opcjonalnie plik z LOG_FILE
    - wyciszone biblioteki zewnetrzne
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if LOG_FILE:
        handlers.append(logging.FileHandler(LOG_FILE))

    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format=LOG_FORMAT,
        handlers=handlers,
    )

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name):
    return logging.getLogger(name)
