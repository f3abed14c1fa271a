"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` in the lambda handler's `__init__.py` file
before any other logging is done.

Logging format:
{
    "timestamp": "2025-12-26T12:00:00.000Z",
    "level": "INFO",
    "logger": "urlshortener.service",
    "message": "Service call finished.",
    "method": "shorten",
    "tookMs": 3.1,
    "errorCode": null
}
"""

import os
import json
import time
import logging
import logging.config
import functools
from datetime import datetime, UTC
from collections.abc import Callable

from urlshortener.constants import ENV


class JsonFormatter(logging.Formatter):
    """JSON formatter that includes LogRecord extras"""

    STANDARD_ATTRS = frozenset(
        {
            'args',
            'asctime',
            'created',
            'exc_info',
            'exc_text',
            'filename',
            'funcName',
            'levelname',
            'levelno',
            'lineno',
            'module',
            'msecs',
            'msg',
            'name',
            'pathname',
            'process',
            'processName',
            'relativeCreated',
            'stack_info',
            'thread',
            'threadName',
            'taskName',
        }
    )

    def format(self, record: logging.LogRecord) -> str:
        # fmt: off
        timestamp = datetime.fromtimestamp(record.created, tz=UTC) \
                            .isoformat(timespec="milliseconds") \
                            .replace("+00:00", "Z")
        # fmt: on

        log = {
            'timestamp': timestamp,
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        # Attach `extra` fields
        for key, value in record.__dict__.items():
            if key not in self.STANDARD_ATTRS:
                log[key] = value

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        return json.dumps(log, default=str)


def initialize_logging() -> None:
    log_level = os.getenv(ENV.App.LOG_LEVEL, 'INFO').upper()
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'json': {
                    '()': JsonFormatter,
                }
            },
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                }
            },
            'root': {
                'level': log_level,
                'handlers': ['stdout'],
            },
        }
    )


def log_service_call(method: Callable) -> Callable:
    """Decorator: log every call of a service method

    Logs the method name, its arguments, how long it took and, if it raised,
    the exception's error code. Exceptions are re-raised unchanged.

    Example:
        >>> class Service:
        ...     @log_service_call
        ...     def resolve(self, shortcode): ...
    """
    logger = logging.getLogger(method.__module__)

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        begin = time.perf_counter()
        error = None
        try:
            return method(self, *args, **kwargs)
        except Exception as e:
            error = e
            raise
        finally:
            logger.info(
                'Service call finished.',
                extra={
                    'method': method.__name__,
                    'arguments': [repr(a) for a in args] + [f'{k}={v!r}' for k, v in kwargs.items()],
                    'tookMs': round((time.perf_counter() - begin) * 1000, 3),
                    'errorCode': getattr(error, 'error_code', type(error).__name__) if error else None,
                },
            )

    return wrapper
