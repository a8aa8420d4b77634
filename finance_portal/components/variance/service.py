"""
Variance Analysis Service
Rule-based workbook runs and AI analysis sessions on the finance backend
"""
import logging

from finance_portal.components import register_component
from finance_portal.config.settings import PortalConfig
from finance_portal.core import get_backend_client

logger = logging.getLogger(__name__)

# Optional single-file inputs accepted next to the period workbooks
EXTRA_FILE_FIELDS = ['mapping_file', 'loan_interest_file', 'revenue_breakdown_file', 'unit_for_lease_file']


def _url(path):
    return PortalConfig.get_api_url('finance', f'/api{path}')


@register_component('variance')
class VarianceService:
    """Variance analysis: direct workbook processing or a logged AI session"""

    title = 'Variance Analysis'
    description = 'Compare period workbooks and explain the movements'
    path = '/variance-analysis'

    @property
    def client(self):
        return get_backend_client()

    def process(self, files, data):
        """Run the rule-based analysis and return the result workbook"""
        logger.info("Running variance analysis on %d file(s)", len(files))
        return self.client.download(_url('/process'), default_filename='variance_analysis_python.xlsx',
                                    method='POST', files=files, data=data)

    def start_analysis(self, files, data):
        """Start an AI analysis session; the backend answers with its session_id"""
        logger.info("Starting AI variance analysis on %d file(s)", len(files))
        return self.client.post(_url('/start-analysis'), files=files, data=data)

    def log_lines(self, session_id):
        return self.client.stream_lines(_url(f'/logs/{session_id}'))

    def download(self, session_id):
        return self.client.download(_url(f'/download/{session_id}'),
                                    default_filename=f'ai_variance_analysis_{session_id}.xlsx')

    def list_debug_files(self, session_id):
        return self.client.get(_url(f'/debug/list/{session_id}'))

    def download_debug_file(self, file_key):
        return self.client.download(_url(f'/debug/{file_key}'),
                                    default_filename=file_key.rsplit('/', 1)[-1])
