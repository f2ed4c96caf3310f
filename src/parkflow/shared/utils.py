import sys
from loguru import logger as loguru_logger

from parkflow.config.settings_env import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def initialize_logger():
    """Route Parkflow logs to stderr, and to a rotating file when LOG_FILE is set.

    DEV_MODE lowers the threshold to TRACE.
    """
    loguru_logger.remove()

    level = "TRACE" if settings.DEV_MODE else "INFO"
    loguru_logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    if settings.LOG_FILE:
        loguru_logger.add(
            settings.LOG_FILE,
            level=level,
            format=LOG_FORMAT,
            rotation=settings.LOG_ROTATION,
            retention=settings.LOG_RETENTION,
        )

    return loguru_logger


logger = initialize_logger()
