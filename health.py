from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from errors import is_connection_error
from extensions import db

health_bp = Blueprint('health', __name__)


@health_bp.route('/health')
def health_check():
    """Health check endpoint for the hosting platform"""
    try:
        db.session.execute(text('SELECT 1'))
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Health check failed: {e}", exc_info=e)
        return jsonify({
            'status': 'error',
            'message': 'Database unavailable',
            'isConnectionError': is_connection_error(e),
        }), 503
    return jsonify({
        'status': 'ok',
        'message': 'Service is running',
        'version': '1.0.0'
    })
