"""
Finance Portal
Flask application assembled from feature components
"""
import logging
import os

from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from finance_portal.config.settings import PortalConfig
from finance_portal.core import BackendClient, BackendMonitor, LogBufferHandler, system_logs
from finance_portal.core.parse_history import ParseHistoryStore
from finance_portal.routes.main_routes import main_bp

from finance_portal.components.projects import init_projects
from finance_portal.components.bank_statements import init_bank_statements
from finance_portal.components.utility_billing import init_utility_billing
from finance_portal.components.excel_comparison import init_excel_comparison
from finance_portal.components.gla_variance import init_gla_variance
from finance_portal.components.variance import init_variance
from finance_portal.components.users import init_users
from finance_portal.components.system_logs import init_system_logs

logger = logging.getLogger(__name__)


def setup_logging(level=logging.INFO):
    """Console logging plus the in-memory buffer behind /api/logs"""
    logging.basicConfig(level=level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    root = logging.getLogger()
    if not any(isinstance(h, LogBufferHandler) for h in root.handlers):
        root.addHandler(LogBufferHandler(system_logs))


class PortalApp:
    """Main portal application class"""

    def __init__(self, config_object=PortalConfig):
        self.config_object = config_object
        self.app = None
        self.monitor = None

    def create_app(self):
        """Create and configure Flask application"""
        setup_logging()

        template_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'templates')
        self.app = Flask(__name__, template_folder=template_dir)

        # Load configuration
        self.app.config.from_object(self.config_object)
        config = self.app.config

        Limiter(
            key_func=get_remote_address,
            app=self.app,
            default_limits=[config['RATELIMIT_DEFAULT']],
            storage_uri=config['RATELIMIT_STORAGE_URL'],
        )

        # Shared services used by the components
        self.app.extensions['backend_client'] = BackendClient(config['API_BASE_URL'],
                                                              timeout=config['API_TIMEOUT'])
        self.app.extensions['parse_history'] = ParseHistoryStore(config['PARSE_HISTORY_PATH'],
                                                                 limit=config['PARSE_HISTORY_LIMIT'])
        self.monitor = BackendMonitor(base_url=config['API_BASE_URL'],
                                      services=config['BACKEND_SERVICES'],
                                      interval=config['HEALTH_POLL_SECONDS'])
        self.app.extensions['backend_monitor'] = self.monitor

        # Initialize components
        init_projects(self.app)
        init_bank_statements(self.app)
        init_utility_billing(self.app)
        init_excel_comparison(self.app)
        init_gla_variance(self.app)
        init_variance(self.app)
        init_users(self.app)
        init_system_logs(self.app)

        # Register main blueprint
        self.app.register_blueprint(main_bp)

        return self.app

    def run(self, host='0.0.0.0', port=None):
        """Start the portal"""
        if self.app is None:
            self.create_app()

        if self.app.config['ENABLE_HEALTH_MONITOR']:
            self.monitor.start()

        port = port or int(os.environ.get('PORTAL_PORT', 8080))
        logger.info("Finance portal starting on http://localhost:%s (backend %s)",
                    port, self.app.config['API_BASE_URL'])
        self.app.run(host=host, port=port, debug=False)


def main():
    """Main entry point"""
    portal = PortalApp()
    portal.create_app()
    portal.run()


if __name__ == '__main__':
    main()
