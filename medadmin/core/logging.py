"""Process-wide logging setup shared by the API and the CLI entrypoints."""

import logging

from medadmin.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"


def configure_logging(settings: Settings) -> None:
    level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
