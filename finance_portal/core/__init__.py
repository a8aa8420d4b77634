"""
Core services for portal components
"""
from collections import deque

from finance_portal.config.settings import PortalConfig
from .api_client import BackendClient, BackendError, DownloadedFile, error_message, get_backend_client
from .monitoring import BackendMonitor, LogBufferHandler

# Global state - shared across all components
system_logs = deque(maxlen=PortalConfig.MAX_LOG_ENTRIES)

__all__ = [
    'BackendClient',
    'BackendError',
    'DownloadedFile',
    'error_message',
    'get_backend_client',
    'BackendMonitor',
    'LogBufferHandler',
    'system_logs',
]
