"""
Bank Statements Service
Forwards parse, verification and download calls to the backend parser
"""
import logging
import time

from flask import current_app

from finance_portal.components import register_component
from finance_portal.config.settings import PortalConfig
from finance_portal.core import BackendError, get_backend_client
from finance_portal.core.history_filters import extract_sessions

logger = logging.getLogger(__name__)


@register_component('bank_statements')
class BankStatementsService:
    """Service for the Bank Statements component"""

    title = 'Bank Statement Parser'
    description = 'Upload Excel, PDF or ZIP bank statements and download standardised transactions and balances'
    path = '/bank-statement-parser'

    @property
    def client(self):
        return get_backend_client()

    @property
    def history(self):
        return current_app.extensions['parse_history']

    def _url(self, path):
        return PortalConfig.get_api_url('finance', f'/bank-statements{path}')

    def parse(self, mode, files, data, file_names):
        """Send a built batch upload to the parser; records the result in the local history"""
        endpoint = '/parse-pdf' if mode == 'pdf' else '/parse'

        logger.info("Parsing %d file(s) in %s mode", len(files), mode)
        start = time.perf_counter()
        result = self.client.post(self._url(endpoint), files=files, data=data)
        result['processing_time'] = round(time.perf_counter() - start, 2)

        self.history.record(result, mode, file_names)
        return result

    def verify_zip_password(self, pending_file, password):
        """Backend check of a ZIP password"""
        result = self.client.post(
            self._url('/verify-zip-password'),
            files={'file': (pending_file.name, pending_file.data, pending_file.mimetype)},
            data={'password': password},
        )
        return bool(result.get('valid'))

    def analyze_zip(self, pending_file, password=None):
        """List archive contents and flag encrypted PDFs inside"""
        data = {'password': password} if password else {}
        return self.client.post(
            self._url('/analyze-zip'),
            files={'file': (pending_file.name, pending_file.data, pending_file.mimetype)},
            data=data,
        )

    def download_results(self, session_id):
        return self.client.download(self._url(f'/download/{session_id}'),
                                    default_filename=f'bank_statements_{session_id}.xlsx')

    def download_from_history(self, session_id):
        """Workbook regenerated by the backend from stored results"""
        return self.client.download(self._url(f'/download-history/{session_id}'),
                                    default_filename=f'bank_statements_{session_id}.xlsx')

    def get_uploaded_files(self, session_id):
        return self.client.get(self._url(f'/uploaded-files/{session_id}'))

    def download_uploaded_file(self, file_id):
        return self.client.download(self._url(f'/uploaded-file/{file_id}'),
                                    default_filename=f'uploaded_file_{file_id}')

    def get_supported_banks(self):
        """Supported bank list, falling back to the static list when the backend is away"""
        try:
            result = self.client.get(self._url('/supported-banks'))
        except BackendError as e:
            logger.warning("Using fallback supported banks list: %s", e)
            return {
                'banks': PortalConfig.SUPPORTED_BANKS_FALLBACK,
                'pdf_banks': PortalConfig.SUPPORTED_BANKS_PDF,
                'fallback': True,
            }
        if isinstance(result, list):
            result = {'banks': result}
        result.setdefault('pdf_banks', PortalConfig.SUPPORTED_BANKS_PDF)
        return result

    def health(self):
        return self.client.get(self._url('/health'), timeout=PortalConfig.HEALTH_CHECK_TIMEOUT)

    def storage_stats(self):
        return self.client.get(self._url('/storage/stats'))

    def cleanup_storage(self, retention_days=PortalConfig.STORAGE_RETENTION_DAYS):
        logger.info("Cleaning up uploads older than %s days", retention_days)
        return self.client.post(self._url('/storage/cleanup'), params={'retention_days': retention_days})

    def get_project_sessions(self, project_uuid):
        payload = self.client.get(PortalConfig.get_api_url('projects', f'/{project_uuid}/cases/bank-statement'))
        return extract_sessions(payload)
