from functools import wraps

from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, jwt_required, verify_jwt_in_request
from werkzeug.security import check_password_hash, generate_password_hash

from quickbite.errors import Forbidden, Unauthorized
from quickbite.models.schemas import StaffLogin, validate_body

auth_bp = Blueprint('auth', __name__)

PASSWORD_SETTINGS = {
    'kitchen': 'KITCHEN_PASSWORD',
    'admin': 'ADMIN_PASSWORD',
}


def _password_hash(role):
    """Hash of the configured shared password, computed once per app"""
    hashes = current_app.extensions.setdefault('quickbite_staff_hashes', {})
    if role not in hashes:
        hashes[role] = generate_password_hash(current_app.config[PASSWORD_SETTINGS[role]])
    return hashes[role]


def staff_required(*roles):
    """Require a staff token whose role claim is one of ``roles``"""
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            role = get_jwt().get('role')
            if role not in roles:
                raise Forbidden(f'This action requires one of the roles: {", ".join(roles)}')
            return view(*args, **kwargs)
        return wrapper
    return decorator


@auth_bp.route('/api/auth/login', methods=['POST'])
def login():
    """Exchange the kitchen or admin password for a role token"""
    credentials = validate_body(StaffLogin, request.get_json(silent=True))

    if not check_password_hash(_password_hash(credentials.role), credentials.password):
        current_app.logger.warning(f"Failed {credentials.role} login from {request.remote_addr}")
        raise Unauthorized(f'Invalid {credentials.role} password', 'INVALID_CREDENTIALS')

    access_token = create_access_token(
        identity=credentials.role,
        additional_claims={'role': credentials.role},
    )
    current_app.logger.info(f"{credentials.role} signed in")

    return jsonify({
        'accessToken': access_token,
        'role': credentials.role
    }), 200


@auth_bp.route('/api/auth/me', methods=['GET'])
@jwt_required()
def get_profile():
    """Who the presented token belongs to"""
    return jsonify({
        'identity': get_jwt_identity(),
        'role': get_jwt().get('role')
    }), 200
