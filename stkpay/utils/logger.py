"""
Logging Configuration
Centralized logging setup for the STK Push service
"""

import logging
import sys
import time
from logging.handlers import RotatingFileHandler
import os
from typing import Any, Dict

_REDACTED_FIELDS = ('Password', 'SecurityCredential', 'access_token')


def _log_dir() -> str:
    log_dir = os.getenv('LOG_DIR', 'logs')
    if log_dir and not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError:
            return ''
    return log_dir


_FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
_CONSOLE_FORMAT = '%(levelname)s - %(name)s - %(message)s'
_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Rotate log files at 10MB, keep 10
_MAX_BYTES = 10485760
_BACKUP_COUNT = 10


def _handlers():
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    handlers = [console]

    log_dir = _log_dir()
    if log_dir:
        service_log = RotatingFileHandler(
            os.path.join(log_dir, 'stkpay.log'),
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT
        )
        service_log.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
        handlers.append(service_log)

    return handlers


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a stkpay module, writing INFO and above to stdout and,
    when LOG_DIR is set, to LOG_DIR/stkpay.log

    Args:
        name: Logger name (typically __name__)
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        logger.setLevel(logging.INFO)
        for handler in _handlers():
            handler.setLevel(logging.INFO)
            logger.addHandler(handler)

    return logger


def redact(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a Daraja request/response body that is safe to log."""
    return {
        key: '[HIDDEN]' if key in _REDACTED_FIELDS else value
        for key, value in (payload or {}).items()
    }


def configure_app_logging(app):
    """
    Configure logging for the Flask application

    Args:
        app: Flask application instance
    """
    app.logger.setLevel(logging.INFO)

    log_dir = app.config.get('LOG_DIR')
    if not log_dir:
        return

    if not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError:
            return

    error_handler = RotatingFileHandler(
        os.path.join(log_dir, 'error.log'),
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT
    )
    error_handler.setLevel(logging.ERROR)
    error_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s\n%(pathname)s:%(lineno)d',
        datefmt=_DATE_FORMAT
    )
    error_handler.setFormatter(error_formatter)

    app.logger.addHandler(error_handler)


class RequestLogger:
    """
    One log line per request: method, path, status, client and duration.

    The client is identified the same way the rate limiter keys it.
    """

    def __init__(self, app=None):
        self.app = app
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        logger = get_logger('stkpay.http')

        @app.before_request
        def start_timer():
            from flask import g
            g.request_started = time.perf_counter()

        @app.after_request
        def log_request(response):
            from flask import g, request
            from stkpay.utils.decorators import client_identifier

            started = g.get('request_started')
            elapsed_ms = (time.perf_counter() - started) * 1000 if started is not None else 0.0
            logger.info(
                f'{request.method} {request.path} {response.status_code} '
                f'client={client_identifier()} {elapsed_ms:.1f}ms'
            )
            return response
