import logging

from .config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the API process and the Celery worker."""
    level = level or get_settings().LOG_LEVEL
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
