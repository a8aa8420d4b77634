"""
Portal configuration settings
"""
import os
from datetime import timedelta


class PortalConfig:
    """Centralized configuration for the finance portal"""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'your-secret-key-here-change-in-production')
    PERMANENT_SESSION_LIFETIME = timedelta(hours=8)
    MAX_CONTENT_LENGTH = 200 * 1024 * 1024

    # Rate limiting
    RATELIMIT_STORAGE_URL = "memory://"
    RATELIMIT_DEFAULT = "100 per minute"

    # Backend API
    API_BASE_URL = os.environ.get('PORTAL_API_BASE_URL', 'http://localhost:8000').rstrip('/')
    API_TIMEOUT = int(os.environ.get('PORTAL_API_TIMEOUT', 300))  # large file processing
    AUTH_API_TIMEOUT = 30

    # Backend path prefixes - every feature lives under its own prefix
    API_PREFIXES = {
        'projects': '/api/projects',
        'finance': '/api/finance',
        'fpa': '/api/fpa',
        'billing': '/api/v1/billing',
        'comparison': '/api',
        'auth': '/api/auth',
    }

    # Health endpoints polled by the backend monitor
    BACKEND_SERVICES = {
        'backend': {
            'name': 'Finance Backend',
            'health_path': '/health',
        },
        'bank_statements': {
            'name': 'Bank Statement Parser',
            'health_path': '/api/finance/bank-statements/health',
        },
        'utility_billing': {
            'name': 'Utility Billing',
            'health_path': '/api/v1/billing/health',
        },
    }
    HEALTH_POLL_SECONDS = int(os.environ.get('PORTAL_HEALTH_POLL_SECONDS', 30))
    HEALTH_CHECK_TIMEOUT = 3
    ENABLE_HEALTH_MONITOR = os.environ.get('PORTAL_HEALTH_MONITOR', '1') == '1'

    # Local parse history (survives portal restarts)
    PARSE_HISTORY_PATH = os.environ.get(
        'PORTAL_PARSE_HISTORY_PATH',
        os.path.join(os.path.expanduser('~'), '.finance_portal', 'bank_statement_parse_history.json')
    )
    PARSE_HISTORY_LIMIT = 20

    # Upload rules
    ACCEPTED_EXTENSIONS = {
        'excel': ['.xlsx', '.xls', '.zip'],
        'pdf': ['.pdf', '.zip'],
        'zip': ['.zip'],
        'spreadsheet': ['.xlsx', '.xls'],
    }
    DEFAULT_FILE_MODE = 'excel'

    # Pending upload batches held in memory until parsed or evicted
    BATCH_STORE_MAX_BATCHES = 100
    BATCH_STORE_MAX_BYTES = int(os.environ.get('PORTAL_BATCH_STORE_MAX_BYTES', 1024 * 1024 * 1024))

    SUPPORTED_BANKS_FALLBACK = ['ACB', 'VIB', 'VCB', 'TCB', 'SC', 'KBANK', 'SINOPAC',
                                'OCB', 'WOORI', 'MBB', 'BIDV', 'VTB', 'UOB']
    SUPPORTED_BANKS_PDF = ['KBANK', 'SC', 'TCB', 'VIB', 'ACB', 'UOB']

    # Project cases per feature
    CASE_FEATURES = ['bank-statement', 'contract', 'gla', 'variance',
                     'utility-billing', 'excel-comparison']

    # UI settings
    MAX_LOG_ENTRIES = 1000
    PROJECT_LIST_LIMIT = 100
    PROJECT_SEARCH_LIMIT = 20
    ADMIN_USERS_PAGE_SIZE = 10
    STORAGE_RETENTION_DAYS = 30

    @classmethod
    def get_api_url(cls, prefix_name, path=''):
        """Build a backend URL path for a feature prefix"""
        return f"{cls.API_PREFIXES.get(prefix_name, '')}{path}"

    @classmethod
    def get_accepted_extensions(cls, mode):
        """Get accepted upload extensions for a file mode"""
        return cls.ACCEPTED_EXTENSIONS.get(mode, [])
