"""
Structured Logging Configuration for the document search service

Provides:
- JSON structured logging for production
- Colorized console output for development
- Request logging middleware
- Audit logging for uploads, deletes and searches

Usage:
    from web.logging_config import setup_logging, get_logger

    # At app startup
    setup_logging(app, level='INFO', json_format=True)

    # In modules
    logger = get_logger(__name__)
    logger.info('Message', extra={'document_id': doc.id})
"""

import json
import logging
import os
import sys
import time
import traceback
import uuid
from datetime import datetime, timezone
from functools import wraps

from flask import g, has_request_context, request

# LogRecord attributes that are not user supplied extras
_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'exc_info', 'exc_text',
    'thread', 'threadName', 'taskName', 'message',
}


# =============================================================================
# Custom Formatters
# =============================================================================

class JSONFormatter(logging.Formatter):
    """JSON structured log formatter for production."""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        # Add any extra attributes from the record
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                log_entry[key] = value

        # Add exception info if present
        if record.exc_info:
            log_entry['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': traceback.format_exception(*record.exc_info)
            }

        return json.dumps(log_entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Colorized console formatter for development."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.COLORS.get(record.levelname, '')
        reset = self.RESET

        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')

        parts = [
            f'{color}[{timestamp}]{reset}',
            f'{color}{record.levelname:8}{reset}',
            f'{record.name}:',
            record.getMessage()
        ]

        if hasattr(record, 'request_id'):
            parts.insert(2, f'[{str(record.request_id)[:8]}]')

        if hasattr(record, 'duration_ms'):
            parts.append(f'({record.duration_ms}ms)')

        message = ' '.join(parts)

        if record.exc_info:
            message += '\n' + ''.join(traceback.format_exception(*record.exc_info))

        return message


# =============================================================================
# Logger Setup
# =============================================================================

def setup_logging(app, level='INFO', json_format=None):
    """
    Configure logging for the Flask application.

    Args:
        app: Flask application instance
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format (default: True in production)
    """
    if json_format is None:
        json_format = os.getenv('FLASK_ENV', 'production') == 'production'

    log_level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    if json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(ColoredFormatter())

    root_logger.addHandler(console_handler)

    # Flask's logger propagates to the root handler
    app.logger.handlers = []
    app.logger.setLevel(log_level)

    app.logger.info('Logging configured', extra={
        'format': 'json' if json_format else 'colored',
        'level': level
    })

    return root_logger


def get_logger(name):
    """Get a logger with the given name."""
    return logging.getLogger(name)


# =============================================================================
# Request Logging Middleware
# =============================================================================

def setup_request_logging(app):
    """
    Set up request logging middleware.

    Logs:
    - Request start with method, path, and request ID
    - Request end with status code and duration
    """
    logger = get_logger('docsearch.requests')

    @app.before_request
    def before_request():
        """Log request start and set up context."""
        g.request_id = request.headers.get('X-Request-ID', str(uuid.uuid4()))
        g.start_time = time.time()

        logger.debug(
            f'{request.method} {request.path}',
            extra={
                'request_id': g.request_id,
                'method': request.method,
                'path': request.path,
                'remote_addr': request.remote_addr,
            }
        )

    @app.after_request
    def after_request(response):
        """Log request completion."""
        start_time = getattr(g, 'start_time', time.time())
        duration_ms = int((time.time() - start_time) * 1000)
        request_id = getattr(g, 'request_id', 'unknown')

        if response.status_code >= 500:
            log_method = logger.error
        elif response.status_code >= 400:
            log_method = logger.warning
        else:
            log_method = logger.info

        log_method(
            f'{request.method} {request.path} -> {response.status_code}',
            extra={
                'request_id': request_id,
                'method': request.method,
                'path': request.path,
                'status_code': response.status_code,
                'duration_ms': duration_ms,
            }
        )

        response.headers['X-Request-ID'] = request_id
        return response


# =============================================================================
# Performance Logging Decorator
# =============================================================================

def log_performance(logger_name=None):
    """
    Decorator to log function performance.

    Usage:
        @log_performance('docsearch.search')
        def search_documents():
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(logger_name or func.__module__)
            request_id = getattr(g, 'request_id', None) if has_request_context() else None
            start_time = time.time()

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f'{func.__name__} failed: {str(e)}',
                    extra={
                        'function': func.__name__,
                        'duration_ms': int((time.time() - start_time) * 1000),
                        'error_type': type(e).__name__,
                        'request_id': request_id
                    }
                )
                raise

            logger.debug(
                f'{func.__name__} completed',
                extra={
                    'function': func.__name__,
                    'duration_ms': int((time.time() - start_time) * 1000),
                    'request_id': request_id
                }
            )
            return result

        return wrapper
    return decorator


# =============================================================================
# Audit Logging
# =============================================================================

class AuditLogger:
    """
    Audit logger for tracking collection changes and searches.

    Usage:
        audit = AuditLogger()
        audit.log_upload(document_id='abc', filename='notes.txt', file_type='txt')
    """

    def __init__(self):
        self.logger = get_logger('docsearch.audit')

    def log_upload(self, document_id, filename, file_type, size_bytes=None, searchable=True):
        """Log a stored document."""
        self.logger.info(
            'Document uploaded',
            extra={
                'audit_type': 'upload',
                'document_id': document_id,
                'filename': filename,
                'file_type': file_type,
                'size_bytes': size_bytes,
                'searchable': searchable
            }
        )

    def log_rejected_upload(self, filename, reason):
        """Log an upload that was not stored."""
        self.logger.info(
            'Document upload rejected',
            extra={
                'audit_type': 'upload_rejected',
                'filename': filename,
                'reason': reason
            }
        )

    def log_delete(self, document_id):
        """Log a document deletion."""
        self.logger.info(
            'Document deleted',
            extra={
                'audit_type': 'delete',
                'document_id': document_id
            }
        )

    def log_search(self, query, results_count, duration_ms=None):
        """Log a search operation."""
        self.logger.info(
            'Search performed',
            extra={
                'audit_type': 'search',
                'query': query[:100] if query else None,
                'results_count': results_count,
                'duration_ms': duration_ms
            }
        )
