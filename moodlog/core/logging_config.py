"""
Logging setup for the moodlog service.

Every module logs through a named child of the "moodlog" logger, e.g.
``logging.getLogger("moodlog.achievements")``. Handlers are attached once,
at application start-up.
"""
import logging

from moodlog.core.config import settings

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format=LOG_FORMAT)
