import logging
import sys
from logging import StreamHandler

from src.config.settings import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that drown the application's own output at DEBUG
NOISY_LOGGERS = ["httpcore", "httpx", "aiosqlite", "asyncio"]


def setup_logging() -> None:
    level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[StreamHandler(sys.stdout)],
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))
    # SQL echo is controlled by LOG_DB, not by the application level
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.LOG_DB else logging.WARNING
    )
