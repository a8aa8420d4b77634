"""
GLA Variance API Routes
"""
from flask import Blueprint, jsonify, request

from finance_portal.components.projects import fetch_gated_project
from finance_portal.core import BackendError
from finance_portal.core.file_checks import is_valid_file
from finance_portal.core.responses import backend_error_response, send_download
from .service import GLAVarianceService

gla_variance_bp = Blueprint('gla_variance', __name__, url_prefix='/api/gla-variance')

# Service instance
service = GLAVarianceService()


@gla_variance_bp.route('/analyze', methods=['POST'])
def api_analyze():
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return jsonify({'error': 'Please select a file before analyzing'}), 400
    if not is_valid_file(upload.filename, 'spreadsheet'):
        return jsonify({'error': 'Please select a valid Excel file (.xlsx or .xls)'}), 400

    project_uuid = request.form.get('project_uuid') or None
    if project_uuid:
        _, gate_error = fetch_gated_project(project_uuid)
        if gate_error:
            return gate_error

    try:
        return jsonify(service.analyze(upload.filename, upload.read(), upload.mimetype,
                                       project_uuid=project_uuid))
    except BackendError as e:
        return backend_error_response(e, 'An error occurred during analysis')


@gla_variance_bp.route('/download/<path:filename>', methods=['GET'])
def api_download(filename):
    try:
        return send_download(service.download(filename))
    except BackendError as e:
        return backend_error_response(e, 'Failed to download analysis result')


def init_gla_variance(app):
    """Initialize GLA Variance component with Flask app"""
    app.register_blueprint(gla_variance_bp)
    return gla_variance_bp
