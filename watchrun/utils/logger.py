# watchrun/utils/logger.py

"""
Logging for watchrun

Console logs go to stderr so stdout stays free for command output.
Session code logs through a SessionLogger, which tags every record with
the session name; the JSON format emits it as its own field.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that are only interesting when something breaks
QUIET_LOGGERS = ('watchdog', 'asyncio')

LOG_FORMATS = ('text', 'json', 'color')


class JsonFormatter(logging.Formatter):
    """One JSON object per record"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'time': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'thread': record.threadName,
            'message': record.getMessage(),
        }

        session = getattr(record, 'session', None)
        if session:
            entry['session'] = session

        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ColorFormatter(logging.Formatter):
    """Text format with the level name colored by severity"""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[41m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname)
        if not color:
            return super().format(record)

        # Other handlers share the record
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


class SessionLogger(logging.LoggerAdapter):
    """Prefixes messages with the session name and attaches it to the record"""

    def process(self, msg, kwargs):
        session = self.extra['session']
        extra = dict(kwargs.get('extra') or {})
        extra.setdefault('session', session)
        kwargs['extra'] = extra
        return f"[{session}] {msg}", kwargs


def session_logger(name: str, session: str) -> SessionLogger:
    """Logger for module `name` acting on behalf of `session`"""
    return SessionLogger(logging.getLogger(name), {'session': session})


def make_formatter(log_format: str) -> logging.Formatter:
    log_format = (log_format or 'text').lower()
    if log_format not in LOG_FORMATS:
        raise ValueError(f"Unknown log format: {log_format}")
    if log_format == 'json':
        return JsonFormatter()
    if log_format == 'color':
        return ColorFormatter(fmt=TEXT_FORMAT, datefmt=DATE_FORMAT)
    return logging.Formatter(fmt=TEXT_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_format: str = "text",
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> logging.Logger:
    """
    Configure the root logger, replacing any handlers it already has

    Args:
        log_level: Level name; unknown names fall back to INFO
        log_file: Also log to this file, rotated by size
        log_format: text, json or color (color applies to the console only)
        max_file_size: Rotate the log file past this many bytes
        backup_count: Rotated files to keep

    Returns:
        The root logger
    """
    level = getattr(logging, str(log_level).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(make_formatter(log_format))
    root.addHandler(console)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=log_path,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(make_formatter('json' if log_format == 'json' else 'text'))
        root.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    root.debug(f"Logging configured: level={log_level} format={log_format} file={log_file}")
    return root


def log_exception(logger: logging.Logger, exception: BaseException,
                  message: str = "Exception occurred", extra: Optional[Dict[str, Any]] = None):
    """
    Log an exception with its traceback

    Args:
        logger: Logger or SessionLogger
        exception: Exception to log; need not be the one being handled
        message: Log message
        extra: Extra record attributes
    """
    exc_info = (type(exception), exception, exception.__traceback__)
    logger.error(message, exc_info=exc_info, extra=extra)
