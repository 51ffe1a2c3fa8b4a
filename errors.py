from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from extensions import db

# Substrings that identify a lost/unreachable database in driver error messages
CONNECTION_ERROR_MARKERS = (
    "Can't reach database server",
    "could not connect to server",
    "Connection refused",
    "server closed the connection unexpectedly",
    "connection timed out",
    "unable to open database file",
)


def api_error(message, status, details=None, **extra):
    """JSON failure envelope: {"error": ..., "details": ...}"""
    body = {'error': message}
    if details is not None:
        body['details'] = details
    body.update(extra)
    return jsonify(body), status


def is_connection_error(exc) -> bool:
    text = str(exc)
    return any(marker in text for marker in CONNECTION_ERROR_MARKERS)


def server_error(message, exc):
    """Roll back, log and answer 500 with a classified `details` field"""
    db.session.rollback()
    current_app.logger.error(f"{message}: {exc}", exc_info=exc)
    connection_error = is_connection_error(exc)
    return api_error(
        message,
        500,
        details='Database connection error' if connection_error else 'Server error',
        isConnectionError=connection_error,
    )


def register_error_handlers(app):
    """Answer API errors with the JSON envelope instead of HTML pages"""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        if not request.path.startswith('/api/'):
            return e
        return api_error(e.name, e.code, details=e.description)

    @app.errorhandler(Exception)
    def handle_unexpected_exception(e):
        if isinstance(e, HTTPException):
            return handle_http_exception(e)
        return server_error('Internal server error', e)


def validation_error(form):
    return api_error('Validation error', 400, details=form.errors)
