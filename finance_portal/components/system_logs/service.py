"""
System Logs Service
Reads the portal's in-memory log buffer and the backend monitor snapshot
"""
from flask import current_app


class SystemLogsService:
    """Service for System Logs component"""

    def get_logs(self, level_filter='ALL', limit=50):
        """Most recent buffered log entries, optionally for one level only"""
        from finance_portal.core import system_logs

        logs = list(system_logs)

        if level_filter != 'ALL':
            logs = [log for log in logs if log.get('level') == level_filter]

        if limit and len(logs) > limit:
            logs = logs[-limit:]

        return logs

    def get_backend_status(self):
        monitor = current_app.extensions.get('backend_monitor')
        if monitor is None:
            return {'monitoring': False, 'services': {}}
        return {'monitoring': monitor.running, 'services': monitor.get_services_status()}
