"""Logging for the fda-news data layer.

Every module logs through get_logger(__name__). Each logger writes to a
rotating file (DEBUG and up) and to stdout (INFO and up), and masks upstream
credentials before a record reaches any handler.
"""
import logging
import logging.handlers
import os
import re
import sys
from pathlib import Path

LOG_MAX_BYTES = 20 * 1024 * 1024
LOG_BACKUP_COUNT = 5

FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"

# openFDA sends api_key, Finnhub sends token, both as query parameters
_SECRET_PARAM_RE = re.compile(r"\b((?:api_key|token)=)[^&\s'\"]+", re.IGNORECASE)


def redact(text: str) -> str:
    """Mask credential query parameters in text.

    Example:
        >>> redact("GET /quote?symbol=LLY&token=abc123")
        'GET /quote?symbol=LLY&token=***'
    """
    return _SECRET_PARAM_RE.sub(r"\1***", text)


class RedactSecretsFilter(logging.Filter):
    """Rewrites the rendered message when it carries an api_key/token value."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def _file_handler(log_path: Path) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    return handler


def setup_logger(
    name: str = "fdanews",
    log_file: str = "fdanews.log",
    level: str = "INFO",
    log_dir: str = "."
) -> logging.Logger:
    """Attach the file/console handler pair and the redaction filter to a logger.

    Args:
        name: Logger name (usually __name__)
        log_file: Log file name (default fdanews.log)
        level: Logger level (DEBUG/INFO/WARNING/ERROR)
        log_dir: Directory for the log file, created if missing

    Returns:
        The configured Logger. Calling again for the same name does not
        stack a second set of handlers.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    if not any(isinstance(f, RedactSecretsFilter) for f in logger.filters):
        logger.addFilter(RedactSecretsFilter())

    if logger.handlers:
        return logger

    log_path = Path(log_dir) / log_file
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.addHandler(_file_handler(log_path))
    logger.addHandler(_console_handler())
    return logger


def get_logger(name: str = "fdanews") -> logging.Logger:
    """Logger for a module, configured on first use.

    FDA_NEWS_LOG_LEVEL and FDA_NEWS_LOG_DIR override the defaults.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    return setup_logger(
        name,
        level=os.getenv("FDA_NEWS_LOG_LEVEL", "INFO"),
        log_dir=os.getenv("FDA_NEWS_LOG_DIR", "."),
    )
