"""
Utility Billing API Routes
"""
import logging

from flask import Blueprint, jsonify, request, session

from finance_portal.core import BackendError, error_message
from finance_portal.core.file_checks import is_valid_file
from finance_portal.core.responses import backend_error_response, send_download
from .service import FILE_TYPES, UtilityBillingService

logger = logging.getLogger(__name__)

utility_billing_bp = Blueprint('utility_billing', __name__, url_prefix='/api/utility-billing')

# Service instance
service = UtilityBillingService()

SESSION_KEY = 'billing_session_id'
NO_SESSION = 'No active billing session'


def current_billing_session():
    return session.get(SESSION_KEY)


def _no_session_response():
    return jsonify({'error': NO_SESSION}), 400


@utility_billing_bp.route('/session', methods=['POST'])
def api_create_session():
    """Create a billing session and remember it for this browser session"""
    data = request.get_json(silent=True) or {}
    try:
        result = service.create_session(project_uuid=data.get('project_uuid'))
    except BackendError as e:
        return backend_error_response(e, 'Failed to create session')

    session_id = result.get('session_id')
    if not session_id:
        logger.error("Billing backend returned no session id: %s", result)
        return jsonify({'error': 'Failed to create session'}), 502
    session[SESSION_KEY] = session_id
    return jsonify(result), 201


@utility_billing_bp.route('/session', methods=['GET'])
def api_get_session():
    return jsonify({'session_id': current_billing_session()})


@utility_billing_bp.route('/session', methods=['DELETE'])
def api_cleanup_session():
    session_id = current_billing_session()
    if not session_id:
        return _no_session_response()
    try:
        result = service.cleanup_session(session_id)
    except BackendError as e:
        return backend_error_response(e, 'Failed to clean up session')
    session.pop(SESSION_KEY, None)
    return jsonify(result or {'cleaned_up': True})


def _upload(target):
    session_id = current_billing_session()
    if not session_id:
        return _no_session_response()

    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return jsonify({'error': 'No file uploaded'}), 400
    if not is_valid_file(upload.filename, 'spreadsheet'):
        return jsonify({'error': 'Only Excel files (.xlsx, .xls) are allowed'}), 400

    try:
        return jsonify(service.upload(session_id, target, upload.filename, upload.read(),
                                      upload.mimetype or 'application/octet-stream'))
    except BackendError as e:
        return backend_error_response(e, f'Failed to upload {target} file')


@utility_billing_bp.route('/upload/input', methods=['POST'])
def api_upload_input():
    return _upload('input')


@utility_billing_bp.route('/upload/master-data', methods=['POST'])
def api_upload_master_data():
    return _upload('master-data')


@utility_billing_bp.route('/files', methods=['GET'])
def api_list_files():
    session_id = current_billing_session()
    if not session_id:
        return _no_session_response()
    try:
        return jsonify(service.list_files(session_id))
    except BackendError as e:
        return backend_error_response(e, 'Failed to list files')


@utility_billing_bp.route('/files/<file_type>/<path:filename>', methods=['DELETE'])
def api_delete_file(file_type, filename):
    if file_type not in FILE_TYPES:
        return jsonify({'error': f'Unknown file type: {file_type}'}), 404
    session_id = current_billing_session()
    if not session_id:
        return _no_session_response()
    try:
        return jsonify(service.delete_file(session_id, file_type, filename))
    except BackendError as e:
        return backend_error_response(e, 'Failed to delete file')


@utility_billing_bp.route('/files/download/<file_type>/<path:filename>', methods=['GET'])
def api_download_file(file_type, filename):
    if file_type not in FILE_TYPES:
        return jsonify({'error': f'Unknown file type: {file_type}'}), 404
    session_id = current_billing_session()
    if not session_id:
        return _no_session_response()
    try:
        return send_download(service.download_file(session_id, file_type, filename))
    except BackendError as e:
        return backend_error_response(e, 'Failed to download file')


@utility_billing_bp.route('/process', methods=['POST'])
def api_process():
    session_id = current_billing_session()
    if not session_id:
        return _no_session_response()
    input_files = (request.get_json(silent=True) or {}).get('input_files') or None
    try:
        return jsonify(service.process(session_id, input_files=input_files))
    except BackendError as e:
        return backend_error_response(e, 'Failed to process billing')


@utility_billing_bp.route('/status', methods=['GET'])
def api_status():
    session_id = current_billing_session()
    if not session_id:
        return _no_session_response()
    try:
        return jsonify(service.status(session_id))
    except BackendError as e:
        return backend_error_response(e, 'Failed to get system status')


@utility_billing_bp.route('/health', methods=['GET'])
def api_health():
    try:
        return jsonify(service.health())
    except BackendError as e:
        return jsonify({'status': 'down', 'error': error_message(e, 'Billing service not reachable')}), 503


def init_utility_billing(app):
    """Initialize Utility Billing component with Flask app"""
    app.register_blueprint(utility_billing_bp)
    return utility_billing_bp
