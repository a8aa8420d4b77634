"""
Shared response helpers for component routes
"""
import io
import logging

from flask import jsonify, send_file

from .api_client import error_message

logger = logging.getLogger(__name__)


def backend_error_response(exc, fallback):
    """JSON error for a failed backend call, status mapped from the backend"""
    message = error_message(exc, fallback)
    logger.error("%s: %s", fallback, message)
    return jsonify({'error': message}), exc.http_status


def send_download(downloaded):
    """Stream a DownloadedFile back to the browser as an attachment"""
    return send_file(
        io.BytesIO(downloaded.content),
        mimetype=downloaded.content_type,
        as_attachment=True,
        download_name=downloaded.filename,
    )
