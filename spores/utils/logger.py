import logging
import sys
from typing import Optional

LOGGER_NAME = "spores"

logger = logging.getLogger(LOGGER_NAME)


def setup_logging(*, verbose: bool = False, stream=None) -> logging.Logger:
    """Configure the package logger.

    Everything goes to stderr; stdout is reserved for JSON output.
    Calling this twice replaces the previous handler instead of stacking.
    """
    level = logging.DEBUG if verbose else logging.INFO

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    fmt = "%(levelname)s %(name)s: %(message)s" if verbose else "%(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger


def log_debug(message: str) -> None:
    logger.debug(message)


def log_info(message: str) -> None:
    logger.info(message)


def log_success(message: str) -> None:
    logger.info(f"✅ {message}")


def log_warning(message: str) -> None:
    logger.warning(f"⚠️ {message}")


def log_error(message: str, exc: Optional[BaseException] = None) -> None:
    if exc is not None and logger.isEnabledFor(logging.DEBUG):
        logger.error(f"❌ {message}", exc_info=exc)
    else:
        logger.error(f"❌ {message}")
