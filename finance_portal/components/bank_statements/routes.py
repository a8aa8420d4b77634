"""
Bank Statements API Routes
Upload batches, encryption prompts, parsing, downloads and history
"""
import logging

from flask import Blueprint, jsonify, request

from finance_portal.components.projects import fetch_gated_project
from finance_portal.config.settings import PortalConfig
from finance_portal.core import BackendError, error_message
from finance_portal.core.file_checks import verify_pdf_password
from finance_portal.core.history_filters import filter_sessions, history_totals, unique_banks
from finance_portal.core.responses import backend_error_response, send_download
from .batch import FILE_MODES, BatchStore
from .service import BankStatementsService

logger = logging.getLogger(__name__)

bank_statements_bp = Blueprint('bank_statements', __name__, url_prefix='/api/bank-statements')

# Service instance
service = BankStatementsService()
batches = BatchStore(max_batches=PortalConfig.BATCH_STORE_MAX_BATCHES,
                     max_bytes=PortalConfig.BATCH_STORE_MAX_BYTES)

INCORRECT_PASSWORD = 'Incorrect password. Please try again.'


def _json_body():
    return request.get_json(silent=True) or {}


def _batch_or_404(batch_id):
    batch = batches.get(batch_id)
    if batch is None:
        return None, (jsonify({'error': 'Upload batch not found'}), 404)
    return batch, None


# -- upload batches ------------------------------------------------------

@bank_statements_bp.route('/batches', methods=['POST'])
def api_create_batch():
    """Start an empty upload batch"""
    mode = _json_body().get('mode') or PortalConfig.DEFAULT_FILE_MODE
    if mode not in FILE_MODES:
        return jsonify({'error': f'Unknown file mode: {mode}'}), 400
    batch = batches.create(mode)
    return jsonify(batch.to_dict()), 201


@bank_statements_bp.route('/batches/<batch_id>', methods=['GET'])
def api_get_batch(batch_id):
    batch, error = _batch_or_404(batch_id)
    if error:
        return error
    return jsonify(batch.to_dict())


@bank_statements_bp.route('/batches/<batch_id>', methods=['DELETE'])
def api_delete_batch(batch_id):
    if not batches.delete(batch_id):
        return jsonify({'error': 'Upload batch not found'}), 404
    return jsonify({'deleted': True})


@bank_statements_bp.route('/batches/<batch_id>/files', methods=['POST'])
def api_add_files(batch_id):
    """Add uploaded files to a batch and report what needs a password"""
    batch, error = _batch_or_404(batch_id)
    if error:
        return error

    uploads = [(f.filename, f.read()) for f in request.files.getlist('files') if f.filename]
    if not uploads:
        return jsonify({'error': 'No files uploaded'}), 400

    with batch.lock:
        result = batch.add_files(uploads)
        result['batch'] = batch.to_dict()
    batches.trim(keep=batch.id)

    if result['rejected']:
        allowed = ', '.join(result['allowed_extensions'])
        result['error'] = (f"Invalid file format. Only {allowed} files are allowed. "
                           f"Rejected: {', '.join(result['rejected'])}")
    return jsonify(result)


@bank_statements_bp.route('/batches/<batch_id>/files/<path:file_name>', methods=['DELETE'])
def api_remove_file(batch_id, file_name):
    batch, error = _batch_or_404(batch_id)
    if error:
        return error
    with batch.lock:
        if not batch.remove_file(file_name):
            return jsonify({'error': 'File not found'}), 404
        return jsonify(batch.to_dict())


@bank_statements_bp.route('/batches/<batch_id>/mode', methods=['POST'])
def api_set_mode(batch_id):
    """Switch between excel, pdf and zip upload; clears the file list"""
    batch, error = _batch_or_404(batch_id)
    if error:
        return error
    mode = _json_body().get('mode')
    if mode not in FILE_MODES:
        return jsonify({'error': f'Unknown file mode: {mode}'}), 400
    with batch.lock:
        batch.set_mode(mode)
        return jsonify(batch.to_dict())


@bank_statements_bp.route('/batches/<batch_id>/clear', methods=['POST'])
def api_clear_batch(batch_id):
    batch, error = _batch_or_404(batch_id)
    if error:
        return error
    with batch.lock:
        batch.clear()
        return jsonify(batch.to_dict())


@bank_statements_bp.route('/batches/<batch_id>/passwords', methods=['POST'])
def api_submit_file_password(batch_id):
    """Check and store the password for an encrypted ZIP or PDF"""
    batch, error = _batch_or_404(batch_id)
    if error:
        return error

    data = _json_body()
    file_name = data.get('file_name') or ''
    password = data.get('password') or ''
    if not password:
        return jsonify({'error': 'Password is required'}), 400

    with batch.lock:
        pending_file = batch.files.get(file_name)
    file_type = batch.file_type_for(file_name)
    if pending_file is None or file_type is None:
        return jsonify({'error': 'File not found'}), 404

    if file_type == 'zip':
        try:
            valid = service.verify_zip_password(pending_file, password)
        except BackendError as e:
            message = error_message(e, 'Failed to verify password. Please try again.')
            logger.error("Error verifying ZIP password for %s: %s", file_name, message)
            return jsonify({'error': 'Failed to verify password. Please try again.'}), e.http_status
    else:
        valid = verify_pdf_password(pending_file.data, password)

    if not valid:
        return jsonify({'error': INCORRECT_PASSWORD, 'fileName': file_name, 'fileType': file_type}), 401

    with batch.lock:
        if file_name not in batch.files:
            # removed while the password was being checked
            return jsonify({'error': 'File not found'}), 404
        prompt = batch.confirm_password(file_name, password)
        return jsonify({'valid': True, 'prompt': prompt, 'batch': batch.to_dict()})


@bank_statements_bp.route('/batches/<batch_id>/zip-analysis', methods=['POST'])
def api_analyze_zip(batch_id):
    """Ask the backend what is inside an archive"""
    batch, error = _batch_or_404(batch_id)
    if error:
        return error

    file_name = _json_body().get('file_name') or ''
    with batch.lock:
        pending_file = batch.files.get(file_name)
        password = batch.zip_passwords.get(file_name)
    if pending_file is None or batch.file_type_for(file_name) != 'zip':
        return jsonify({'error': 'File not found'}), 404

    try:
        analysis = service.analyze_zip(pending_file, password)
    except BackendError as e:
        return backend_error_response(e, 'Failed to analyze ZIP')

    encrypted_pdfs = [f.get('filename') for f in analysis.get('files', [])
                      if f.get('is_encrypted') and f.get('file_type') == 'pdf']
    return jsonify({'fileName': file_name, 'analysis': analysis, 'encrypted_pdfs': encrypted_pdfs})


@bank_statements_bp.route('/batches/<batch_id>/zip-pdf-passwords', methods=['POST'])
def api_zip_pdf_passwords(batch_id):
    """Store passwords for encrypted PDFs inside an archive and move on to the next one"""
    batch, error = _batch_or_404(batch_id)
    if error:
        return error
    passwords = _json_body().get('passwords') or {}
    if not isinstance(passwords, dict):
        return jsonify({'error': 'passwords must be an object'}), 400
    with batch.lock:
        prompt = batch.merge_zip_pdf_passwords(passwords)
        return jsonify({'prompt': prompt, 'batch': batch.to_dict()})


@bank_statements_bp.route('/batches/<batch_id>/zip-analysis/close', methods=['POST'])
def api_close_zip_analysis(batch_id):
    batch, error = _batch_or_404(batch_id)
    if error:
        return error
    with batch.lock:
        batch.close_zip_analysis()
        return jsonify(batch.to_dict())


@bank_statements_bp.route('/batches/<batch_id>/process', methods=['POST'])
def api_process_batch(batch_id):
    """Parse every file in the batch"""
    batch, error = _batch_or_404(batch_id)
    if error:
        return error

    project_uuid = _json_body().get('project_uuid') or request.args.get('project')

    # The upload is built from one consistent view of the batch; edits made
    # while the backend is parsing apply to the next run.
    with batch.lock:
        if not batch.files:
            return jsonify({'error': 'Please select at least one bank statement file'}), 400

        missing = batch.missing_password()
        if missing:
            batch.prompt = missing
            return jsonify({
                'error': f"Please enter password for encrypted file: {missing['fileName']}",
                'prompt': missing,
            }), 400

        mode = batch.mode
        file_names = batch.file_names()
        files, data = batch.build_upload(project_uuid)

    if project_uuid:
        _, gate_error = fetch_gated_project(project_uuid)
        if gate_error:
            return gate_error

    try:
        result = service.parse(mode, files, data, file_names)
    except BackendError as e:
        return backend_error_response(e, 'Failed to process bank statements')
    return jsonify(result)


# -- downloads and backend metadata ---------------------------------------

@bank_statements_bp.route('/download/<session_id>', methods=['GET'])
def api_download_results(session_id):
    try:
        return send_download(service.download_results(session_id))
    except BackendError as e:
        return backend_error_response(e, 'Failed to download results file')


@bank_statements_bp.route('/download-history/<session_id>', methods=['GET'])
def api_download_from_history(session_id):
    try:
        return send_download(service.download_from_history(session_id))
    except BackendError as e:
        return backend_error_response(e, 'Failed to download. Please try again.')


@bank_statements_bp.route('/uploaded-files/<session_id>', methods=['GET'])
def api_uploaded_files(session_id):
    try:
        return jsonify(service.get_uploaded_files(session_id))
    except BackendError as e:
        return backend_error_response(e, 'Failed to load uploaded files')


@bank_statements_bp.route('/uploaded-file/<int:file_id>', methods=['GET'])
def api_download_uploaded_file(file_id):
    try:
        return send_download(service.download_uploaded_file(file_id))
    except BackendError as e:
        return backend_error_response(e, 'Failed to download uploaded file')


@bank_statements_bp.route('/supported-banks', methods=['GET'])
def api_supported_banks():
    return jsonify(service.get_supported_banks())


@bank_statements_bp.route('/health', methods=['GET'])
def api_health():
    try:
        return jsonify(service.health())
    except BackendError as e:
        return jsonify({'status': 'down', 'error': error_message(e, 'Parser not reachable')}), 503


@bank_statements_bp.route('/storage/stats', methods=['GET'])
def api_storage_stats():
    try:
        return jsonify(service.storage_stats())
    except BackendError as e:
        return backend_error_response(e, 'Failed to load storage statistics')


@bank_statements_bp.route('/storage/cleanup', methods=['POST'])
def api_storage_cleanup():
    try:
        retention_days = int(request.args.get('retention_days', PortalConfig.STORAGE_RETENTION_DAYS))
    except ValueError:
        return jsonify({'error': 'retention_days must be a number'}), 400
    try:
        return jsonify(service.cleanup_storage(retention_days))
    except BackendError as e:
        return backend_error_response(e, 'Failed to clean up storage')


# -- history ---------------------------------------------------------------

@bank_statements_bp.route('/history', methods=['GET'])
def api_local_history():
    """Recent parse runs recorded by this portal"""
    return jsonify(service.history.entries())


@bank_statements_bp.route('/history/<entry_id>', methods=['DELETE'])
def api_remove_history_entry(entry_id):
    if not service.history.remove(entry_id):
        return jsonify({'error': 'History entry not found'}), 404
    return jsonify({'removed': entry_id})


@bank_statements_bp.route('/history', methods=['DELETE'])
def api_clear_history():
    service.history.clear()
    return jsonify({'cleared': True})


@bank_statements_bp.route('/projects/<project_uuid>/history', methods=['GET'])
def api_project_history(project_uuid):
    """Project parse sessions with the time, bank and file type filters applied"""
    _, gate_error = fetch_gated_project(project_uuid)
    if gate_error:
        return gate_error

    try:
        sessions = service.get_project_sessions(project_uuid)
    except BackendError as e:
        return backend_error_response(e, 'Failed to load project bank statements')

    filtered = filter_sessions(
        sessions,
        time_filter=request.args.get('time', 'all'),
        bank_filter=request.args.get('bank', 'all'),
        file_type_filter=request.args.get('file_type', 'all'),
    )
    return jsonify({
        'sessions': filtered,
        'total_count': len(sessions),
        'filtered_count': len(filtered),
        'unique_banks': unique_banks(sessions),
        'totals': history_totals(sessions),
    })


def init_bank_statements(app):
    """Initialize Bank Statements component with Flask app"""
    app.register_blueprint(bank_statements_bp)
    return bank_statements_bp
