"""
Backend monitoring service
"""
import logging
import threading
import time
from datetime import datetime

import requests

from finance_portal.config.settings import PortalConfig

logger = logging.getLogger(__name__)


class LogBufferHandler(logging.Handler):
    """Mirror log records into an in-memory buffer for the logs view"""

    def __init__(self, buffer):
        super().__init__()
        self.buffer = buffer

    def emit(self, record):
        try:
            self.buffer.append({
                'timestamp': datetime.fromtimestamp(record.created).isoformat(),
                'level': record.levelname,
                'logger': record.name,
                'message': record.getMessage(),
            })
        except Exception:
            self.handleError(record)


class BackendMonitor:
    """Polls backend health endpoints in a background thread"""

    def __init__(self, base_url=None, services=None, interval=None):
        self.base_url = (base_url or PortalConfig.API_BASE_URL).rstrip('/')
        self.services = services if services is not None else PortalConfig.BACKEND_SERVICES
        self.interval = interval or PortalConfig.HEALTH_POLL_SECONDS
        self.running = False
        self.thread = None
        self.services_status = {}
        self._lock = threading.Lock()

    def start(self):
        """Start monitoring thread"""
        if self.thread is None or not self.thread.is_alive():
            self.running = True
            self.thread = threading.Thread(target=self._monitor_loop, daemon=True)
            self.thread.start()
            logger.info("Backend monitor started (every %ss)", self.interval)

    def stop(self):
        """Stop monitoring thread"""
        self.running = False
        if self.thread:
            self.thread.join(timeout=2)

    def _monitor_loop(self):
        while self.running:
            try:
                self.check_all_services()
            except Exception as e:
                logger.error("Monitor loop error: %s", e)
            time.sleep(self.interval)

    def check_all_services(self):
        """Check status of all configured backend services"""
        for service_id, config in self.services.items():
            status = self._check_service_health(config)
            with self._lock:
                old_status = self.services_status.get(service_id, {}).get('status', 'unknown')
                self.services_status[service_id] = {
                    'status': status,
                    'last_check': datetime.now().isoformat(),
                    'name': config.get('name', service_id),
                }
            if status != old_status:
                logger.info("Service %s status changed: %s -> %s", service_id, old_status, status)
        return self.get_services_status()

    def _check_service_health(self, config):
        health_url = f"{self.base_url}{config.get('health_path', '/health')}"
        try:
            response = requests.get(health_url, timeout=PortalConfig.HEALTH_CHECK_TIMEOUT)
        except requests.exceptions.RequestException as e:
            logger.debug("Health check %s failed: %s", health_url, e)
            return 'down'
        return 'healthy' if response.status_code == 200 else 'unhealthy'

    def get_services_status(self):
        """Get current services status"""
        with self._lock:
            return {name: dict(status) for name, status in self.services_status.items()}
