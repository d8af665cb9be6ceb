"""
API error types and the handlers that render them as ``{error, code}`` JSON
"""
from flask import jsonify
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    """Base class for errors reported to the client"""
    status_code = 400
    code = 'BAD_REQUEST'

    def __init__(self, message, code=None, status_code=None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.message, 'code': self.code}


class ValidationFailed(ApiError):
    status_code = 400
    code = 'VALIDATION_ERROR'


class NotFound(ApiError):
    status_code = 404
    code = 'NOT_FOUND'


class Conflict(ApiError):
    # Uniqueness violations keep the legacy 400 status
    status_code = 400
    code = 'DUPLICATE'


class Unauthorized(ApiError):
    status_code = 401
    code = 'AUTH_REQUIRED'


class Forbidden(ApiError):
    status_code = 403
    code = 'FORBIDDEN'


def register_error_handlers(app):
    from quickbite import db

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        app.logger.debug(f"{error.code}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        code = (error.name or 'HTTP error').upper().replace(' ', '_')
        return jsonify({'error': error.description, 'code': code}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        app.logger.exception(f"Unhandled error: {error}")
        return jsonify({
            'error': 'Internal server error',
            'code': 'INTERNAL_ERROR'
        }), 500


def register_jwt_handlers(jwt):
    @jwt.unauthorized_loader
    def missing_token_callback(reason):
        return jsonify({'error': 'Authorization required', 'code': 'AUTH_REQUIRED'}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(reason):
        return jsonify({'error': 'Invalid token', 'code': 'INVALID_TOKEN'}), 401

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_data):
        return jsonify({'error': 'Token expired', 'code': 'TOKEN_EXPIRED'}), 401
