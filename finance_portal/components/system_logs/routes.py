"""
System Logs Component Routes
"""
from flask import Blueprint, jsonify, request

from .service import SystemLogsService

system_logs_bp = Blueprint('system_logs', __name__)

# Service instance
service = SystemLogsService()


@system_logs_bp.route('/api/logs')
def api_logs():
    """Buffered portal logs, filtered by level"""
    level_filter = request.args.get('level', 'ALL').upper()
    try:
        limit = int(request.args.get('limit', 50))
    except ValueError:
        return jsonify({'error': 'limit must be a number'}), 400

    return jsonify(service.get_logs(level_filter=level_filter, limit=limit))


@system_logs_bp.route('/api/backend/status')
def api_backend_status():
    """Last health check result for each backend service"""
    return jsonify(service.get_backend_status())
