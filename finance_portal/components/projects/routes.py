"""
Projects API Routes
Project management plus the password gate for protected projects
"""
import logging

from flask import Blueprint, jsonify, request

from finance_portal.config.settings import PortalConfig
from finance_portal.core import BackendError, error_message, verified_projects
from finance_portal.core.responses import backend_error_response
from .service import ProjectsService

logger = logging.getLogger(__name__)

projects_bp = Blueprint('projects', __name__, url_prefix='/api/projects')

# Service instance
service = ProjectsService()


def _json_body():
    return request.get_json(silent=True) or {}


def _int_arg(name, default):
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


def _project_summary(project):
    return {
        'uuid': project.get('uuid'),
        'project_name': project.get('project_name'),
        'is_protected': bool(project.get('is_protected')),
    }


def password_required_response(project):
    """403 telling the browser to prompt for the project password"""
    return jsonify({
        'error': 'Password required',
        'password_required': True,
        'project': _project_summary(project),
    }), 403


def fetch_gated_project(project_uuid):
    """Fetch a project and apply the password gate

    Returns (project, None) when access is allowed, otherwise (None, response).
    """
    try:
        project = service.get_project(project_uuid)
    except BackendError as e:
        if e.status_code == 404:
            return None, (jsonify({'error': 'Project not found'}), 404)
        return None, backend_error_response(e, 'Failed to load project')

    if verified_projects.needs_password(project):
        return None, password_required_response(project)
    return project, None


@projects_bp.route('', methods=['GET'])
def api_list_projects():
    """Paginated project list"""
    try:
        return jsonify(service.list_projects(
            skip=_int_arg('skip', 0),
            limit=_int_arg('limit', PortalConfig.PROJECT_LIST_LIMIT),
        ))
    except BackendError as e:
        return backend_error_response(e, 'Failed to load projects')


@projects_bp.route('/search', methods=['GET'])
def api_search_projects():
    """Search projects by name; a blank query returns the plain list"""
    query = (request.args.get('q') or '').strip()
    limit = _int_arg('limit', PortalConfig.PROJECT_SEARCH_LIMIT)
    try:
        if not query:
            return jsonify(service.list_projects(limit=PortalConfig.PROJECT_LIST_LIMIT))
        return jsonify(service.search_projects(query, limit=limit))
    except BackendError as e:
        return backend_error_response(e, 'Failed to search projects')


@projects_bp.route('', methods=['POST'])
def api_create_project():
    """Create a project"""
    data = _json_body()
    name = (data.get('project_name') or data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Project name is required'}), 400

    description = (data.get('description') or '').strip() or None
    password = (data.get('password') or '').strip() or None
    try:
        project = service.create_project(name, description=description, password=password)
    except BackendError as e:
        return backend_error_response(e, 'Failed to create project. Please try again.')

    # The creator just chose the password, no need to prompt for it
    if password and project.get('uuid'):
        verified_projects.mark_verified(project['uuid'])
    return jsonify(project), 201


@projects_bp.route('/verified', methods=['GET'])
def api_verified_projects():
    """Projects unlocked in this browser session"""
    return jsonify({'verified': verified_projects.verified_uuids()})


@projects_bp.route('/<project_uuid>', methods=['GET'])
def api_get_project(project_uuid):
    """Project details, gated by the password prompt for protected projects"""
    project, error = fetch_gated_project(project_uuid)
    if error:
        return error
    return jsonify(project)


@projects_bp.route('/<project_uuid>', methods=['PUT'])
def api_update_project(project_uuid):
    data = _json_body()
    name = (data.get('project_name') or data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Project name is required'}), 400
    try:
        project = service.update_project(
            project_uuid,
            name,
            description=(data.get('description') or '').strip(),
            current_password=data.get('current_password') or None,
        )
        return jsonify(project)
    except BackendError as e:
        return backend_error_response(e, 'Failed to update project')


@projects_bp.route('/<project_uuid>/delete', methods=['POST'])
def api_delete_project(project_uuid):
    data = _json_body()
    try:
        result = service.delete_project(project_uuid, current_password=data.get('current_password') or None)
    except BackendError as e:
        return backend_error_response(e, 'Failed to delete project')
    verified_projects.forget(project_uuid)
    return jsonify(result or {'deleted': True})


@projects_bp.route('/<project_uuid>/password', methods=['POST'])
def api_set_project_password(project_uuid):
    """Set or change the project password"""
    data = _json_body()
    password = data.get('password') or data.get('new_password') or ''
    if not password.strip():
        return jsonify({'error': 'Password is required'}), 400
    try:
        result = service.set_password(project_uuid, password,
                                      current_password=data.get('current_password') or None)
    except BackendError as e:
        return backend_error_response(e, 'Failed to set project password')
    # Next visit must prove the new password
    verified_projects.forget(project_uuid)
    return jsonify(result or {'success': True})


@projects_bp.route('/<project_uuid>/verify', methods=['POST'])
def api_verify_project_password(project_uuid):
    """Check a project password and cache the result for this session"""
    password = _json_body().get('password') or ''
    if not password.strip():
        return jsonify({'error': 'Password is required', 'verified': False}), 400

    try:
        verified = service.verify_password(project_uuid, password)
    except BackendError as e:
        message = error_message(e, 'Failed to verify password')
        logger.error("Password verification failed for %s: %s", project_uuid, message)
        return jsonify({'error': message, 'verified': False}), e.http_status

    if not verified:
        return jsonify({'error': 'Invalid password', 'verified': False}), 401

    verified_projects.mark_verified(project_uuid)
    return jsonify({'verified': True, 'project_uuid': project_uuid})


@projects_bp.route('/<project_uuid>/lock', methods=['POST'])
def api_lock_project(project_uuid):
    """Forget the cached verification for this session"""
    verified_projects.forget(project_uuid)
    return jsonify({'locked': True, 'project_uuid': project_uuid})


@projects_bp.route('/<project_uuid>/cases', methods=['GET'])
@projects_bp.route('/<project_uuid>/cases/<feature>', methods=['GET'])
def api_project_cases(project_uuid, feature=None):
    """Per-feature history for a project"""
    if feature and feature not in PortalConfig.CASE_FEATURES:
        return jsonify({'error': f'Unknown feature: {feature}'}), 404

    _, error = fetch_gated_project(project_uuid)
    if error:
        return error
    try:
        return jsonify(service.get_cases(project_uuid, feature))
    except BackendError as e:
        return backend_error_response(e, 'Failed to load project cases')


@projects_bp.route('/<project_uuid>/workspace', methods=['GET'])
def api_project_workspace(project_uuid):
    """Everything the project workspace page shows"""
    project, error = fetch_gated_project(project_uuid)
    if error:
        return error
    try:
        return jsonify(service.get_workspace(project_uuid, project=project))
    except BackendError as e:
        return backend_error_response(e, 'Failed to load project workspace')


def init_projects(app):
    """Initialize Projects component with Flask app"""
    app.register_blueprint(projects_bp)
    return projects_bp
