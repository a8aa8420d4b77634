"""
User Administration API Routes
"""
from flask import Blueprint, jsonify, request

from finance_portal.config.settings import PortalConfig
from finance_portal.core import BackendError
from finance_portal.core.responses import backend_error_response
from .service import USER_ROLES, USER_STATUSES, UsersService

users_bp = Blueprint('users', __name__, url_prefix='/api/admin/users')

# Service instance
service = UsersService()


def _authorization():
    return request.headers.get('Authorization')


def _positive_int_arg(name, default):
    try:
        value = int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


@users_bp.route('', methods=['GET'])
def api_list_users():
    status = request.args.get('status', '')
    if status not in USER_STATUSES:
        return jsonify({'error': f'Unknown status filter: {status}'}), 400
    try:
        return jsonify(service.list_users(
            _authorization(),
            page=_positive_int_arg('page', 1),
            page_size=_positive_int_arg('page_size', PortalConfig.ADMIN_USERS_PAGE_SIZE),
            search=(request.args.get('search') or '').strip(),
            role=request.args.get('role', ''),
            status=status,
        ))
    except BackendError as e:
        return backend_error_response(e, 'Failed to load users')


@users_bp.route('/<user_uuid>/role', methods=['PUT'])
def api_update_role(user_uuid):
    role = (request.get_json(silent=True) or {}).get('role')
    if role not in USER_ROLES:
        return jsonify({'error': f'Role must be one of: {", ".join(USER_ROLES)}'}), 400
    try:
        return jsonify(service.update_role(_authorization(), user_uuid, role))
    except BackendError as e:
        return backend_error_response(e, 'Failed to update role')


@users_bp.route('/<user_uuid>/status', methods=['PUT'])
def api_update_status(user_uuid):
    is_active = (request.get_json(silent=True) or {}).get('is_active')
    if not isinstance(is_active, bool):
        return jsonify({'error': 'is_active must be true or false'}), 400
    try:
        return jsonify(service.update_status(_authorization(), user_uuid, is_active))
    except BackendError as e:
        return backend_error_response(e, 'Failed to update status')


@users_bp.route('/<user_uuid>/revoke-sessions', methods=['POST'])
def api_revoke_sessions(user_uuid):
    try:
        return jsonify(service.revoke_sessions(_authorization(), user_uuid) or {'revoked': True})
    except BackendError as e:
        return backend_error_response(e, 'Failed to revoke sessions')


def init_users(app):
    """Initialize User Administration component with Flask app"""
    app.register_blueprint(users_bp)
    return users_bp
