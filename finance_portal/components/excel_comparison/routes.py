"""
Excel Comparison API Routes
"""
from flask import Blueprint, jsonify, request

from finance_portal.core import BackendError
from finance_portal.core.file_checks import is_valid_file
from finance_portal.core.responses import backend_error_response, send_download
from .service import ExcelComparisonService

excel_comparison_bp = Blueprint('excel_comparison', __name__, url_prefix='/api/excel-comparison')

# Service instance
service = ExcelComparisonService()


def _spreadsheet_upload(field):
    upload = request.files.get(field)
    if upload is None or not upload.filename:
        return None
    return upload


@excel_comparison_bp.route('/compare', methods=['POST'])
def api_compare():
    """Compare the previous workbook (old_file) with the current one (new_file)"""
    old_upload = _spreadsheet_upload('old_file')
    new_upload = _spreadsheet_upload('new_file')
    if old_upload is None or new_upload is None:
        return jsonify({'error': 'Please select both the previous and the current file'}), 400

    for upload in (old_upload, new_upload):
        if not is_valid_file(upload.filename, 'spreadsheet'):
            return jsonify({'error': f'Only Excel files (.xlsx, .xls) are allowed: {upload.filename}'}), 400

    try:
        return jsonify(service.compare(
            (old_upload.filename, old_upload.read(), old_upload.mimetype),
            (new_upload.filename, new_upload.read(), new_upload.mimetype),
        ))
    except BackendError as e:
        return backend_error_response(e, 'An error occurred during comparison')


@excel_comparison_bp.route('/download/<path:filename>', methods=['GET'])
def api_download(filename):
    try:
        return send_download(service.download(filename))
    except BackendError as e:
        return backend_error_response(e, 'Failed to download comparison result')


def init_excel_comparison(app):
    """Initialize Excel Comparison component with Flask app"""
    app.register_blueprint(excel_comparison_bp)
    return excel_comparison_bp
