"""
Variance Analysis API Routes
"""
from flask import Blueprint, jsonify, request

from finance_portal.components.projects import fetch_gated_project
from finance_portal.core import BackendError
from finance_portal.core.file_checks import is_valid_file
from finance_portal.core.responses import backend_error_response, send_download
from .service import EXTRA_FILE_FIELDS, VarianceService
from .sse_handler import VarianceLogStream

variance_bp = Blueprint('variance', __name__, url_prefix='/api/variance')

# Service instance
service = VarianceService()


def _collect_upload(extra_fields=()):
    """Validate the multipart request and build (files, data) for the backend

    Returns (files, data, error_response); error_response is set when the
    request must be rejected.
    """
    workbooks = [f for f in request.files.getlist('excel_files') if f and f.filename]
    if not workbooks:
        return None, None, (jsonify({'error': 'Please select at least one Excel file'}), 400)

    invalid = [f.filename for f in workbooks if not is_valid_file(f.filename, 'spreadsheet')]
    if invalid:
        return None, None, (jsonify({'error': f"Not an Excel file: {', '.join(invalid)}"}), 400)

    files = [('excel_files', (f.filename, f.read(), f.mimetype)) for f in workbooks]
    for field in extra_fields:
        extra = request.files.get(field)
        if extra is None or not extra.filename:
            continue
        if not is_valid_file(extra.filename, 'spreadsheet'):
            return None, None, (jsonify({'error': f'Not an Excel file: {extra.filename}'}), 400)
        files.append((field, (extra.filename, extra.read(), extra.mimetype)))

    # Empty config values are left out
    data = {key: value for key, value in request.form.items() if value}

    project_uuid = data.get('project_uuid')
    if project_uuid:
        _, gate_error = fetch_gated_project(project_uuid)
        if gate_error:
            return None, None, gate_error
    return files, data, None


@variance_bp.route('/process', methods=['POST'])
def api_process():
    files, data, error = _collect_upload(EXTRA_FILE_FIELDS)
    if error:
        return error
    try:
        return send_download(service.process(files, data))
    except BackendError as e:
        return backend_error_response(e, 'Variance analysis failed')


@variance_bp.route('/start-analysis', methods=['POST'])
def api_start_analysis():
    files, data, error = _collect_upload()
    if error:
        return error
    try:
        session = service.start_analysis(files, data)
    except BackendError as e:
        return backend_error_response(e, 'Failed to start AI analysis')
    if not session.get('session_id'):
        return jsonify({'error': 'Backend did not return an analysis session'}), 502
    return jsonify(session)


@variance_bp.route('/logs/<session_id>', methods=['GET'])
def api_stream_logs(session_id):
    """SSE endpoint relaying the analysis log of one session"""
    try:
        lines = service.log_lines(session_id)
    except BackendError as e:
        return backend_error_response(e, 'Failed to open analysis log stream')
    return VarianceLogStream.relay(session_id, lines)


@variance_bp.route('/download/<session_id>', methods=['GET'])
def api_download(session_id):
    try:
        return send_download(service.download(session_id))
    except BackendError as e:
        return backend_error_response(e, 'Failed to download analysis result')


@variance_bp.route('/debug/<session_id>/files', methods=['GET'])
def api_debug_files(session_id):
    try:
        return jsonify(service.list_debug_files(session_id))
    except BackendError as e:
        return backend_error_response(e, 'Failed to list debug files')


@variance_bp.route('/debug/file/<path:file_key>', methods=['GET'])
def api_debug_file(file_key):
    try:
        return send_download(service.download_debug_file(file_key))
    except BackendError as e:
        return backend_error_response(e, 'Failed to download debug file')


def init_variance(app):
    """Initialize Variance Analysis component with Flask app"""
    app.register_blueprint(variance_bp)
    return variance_bp
