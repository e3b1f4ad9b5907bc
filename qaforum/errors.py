import logging

from flask import jsonify

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Raised for any failure talking to PostgreSQL (pool, connection or query)."""


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'message': 'Endpoint not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'message': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error('Unhandled error: %s', getattr(error, 'original_exception', error))
        return jsonify({'message': 'Internal server error'}), 500
