"""
Error Handling for the document search service

Provides:
- Custom exception classes mapped to HTTP status codes
- Flask error handlers rendering JSON bodies
- Request validation decorator

Usage:
    from web.error_handlers import setup_error_handlers, NotFoundError

    # In the app factory
    setup_error_handlers(app)

    # In routes
    if document is None:
        raise NotFoundError("Document not found", document_id=document_id)
"""

import logging
import traceback
from functools import wraps

from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException

logger = logging.getLogger('docsearch.errors')


# =============================================================================
# Custom Exceptions
# =============================================================================

class DocSearchError(Exception):
    """Base exception for service errors."""

    status_code = 500
    error_type = 'internal_error'
    message = 'An unexpected error occurred'

    def __init__(self, message=None, **kwargs):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = kwargs

    def to_dict(self):
        return {
            'success': False,
            'error': self.error_type,
            'message': self.message,
            'details': self.details
        }


class NotFoundError(DocSearchError):
    """Resource not found."""
    status_code = 404
    error_type = 'not_found'
    message = 'Resource not found'


class ValidationError(DocSearchError):
    """Invalid input data."""
    status_code = 400
    error_type = 'validation_error'
    message = 'Invalid input'


class UnsupportedFileTypeError(ValidationError):
    """Upload of a format the service does not accept."""
    error_type = 'unsupported_file_type'
    message = 'Unsupported file type'


class ConflictError(DocSearchError):
    """Resource already exists."""
    status_code = 409
    error_type = 'conflict'
    message = 'Resource already exists'


class PayloadTooLargeError(DocSearchError):
    """Upload exceeds the configured size limit."""
    status_code = 413
    error_type = 'payload_too_large'
    message = 'Request payload is too large'


# =============================================================================
# Error Handlers
# =============================================================================

def setup_error_handlers(app):
    """Register error handlers with Flask app."""

    @app.errorhandler(DocSearchError)
    def handle_docsearch_error(error):
        """Handle custom service errors."""
        logger.warning(
            f'{error.error_type}: {error.message}',
            extra={
                'error_type': error.error_type,
                'details': error.details,
                'path': request.path
            }
        )

        response = jsonify(error.to_dict())
        response.status_code = error.status_code
        return response

    @app.errorhandler(404)
    def handle_not_found(error):
        """Handle 404 errors."""
        return jsonify({
            'error': 'not_found',
            'message': f'Resource not found: {request.path}'
        }), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        """Handle method not allowed errors."""
        return jsonify({
            'error': 'method_not_allowed',
            'message': f'Method {request.method} not allowed for {request.path}'
        }), 405

    @app.errorhandler(413)
    def handle_request_too_large(error):
        """Handle payload too large errors."""
        error = PayloadTooLargeError(max_bytes=current_app.config.get('MAX_CONTENT_LENGTH'))
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        """Render remaining HTTP errors as JSON."""
        return jsonify({
            'error': (error.name or 'http_error').lower().replace(' ', '_'),
            'message': error.description
        }), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        """Handle any unexpected errors."""
        logger.exception(
            f'Unexpected error: {type(error).__name__}: {str(error)}',
            extra={
                'error_type': type(error).__name__,
                'path': request.path
            }
        )

        # Don't expose error details in production
        if current_app.debug:
            return jsonify({
                'error': 'unexpected_error',
                'message': str(error),
                'type': type(error).__name__,
                'traceback': traceback.format_exc()
            }), 500

        return jsonify({
            'error': 'unexpected_error',
            'message': 'An unexpected error occurred'
        }), 500


# =============================================================================
# Request Validation
# =============================================================================

def validate_request_json(*required_fields):
    """
    Decorator to validate required JSON fields in request.

    Usage:
        @validate_request_json('filename', 'fileType')
        def upload():
            data = request.get_json()
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            data = request.get_json(silent=True)

            if not isinstance(data, dict):
                raise ValidationError('Request body must be a JSON object')

            missing = [f for f in required_fields if f not in data]
            if missing:
                raise ValidationError(
                    f'Missing required fields: {", ".join(missing)}',
                    missing_fields=missing
                )

            return func(*args, **kwargs)
        return wrapper
    return decorator
