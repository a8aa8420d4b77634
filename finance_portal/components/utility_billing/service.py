"""
Utility Billing Service
Session-scoped calls to the billing backend
"""
import logging

from finance_portal.components import register_component
from finance_portal.config.settings import PortalConfig
from finance_portal.core import get_backend_client

logger = logging.getLogger(__name__)

FILE_TYPES = ('input', 'master-data', 'output')


@register_component('utility_billing')
class UtilityBillingService:
    """Service for the Utility Billing component

    Every call except session creation and health carries the billing
    session id in the X-Session-ID header.
    """

    title = 'Utility Billing'
    description = 'Generate utility billing from input readings and master data'
    path = '/utility-billing'

    @property
    def client(self):
        return get_backend_client()

    def _url(self, path):
        return PortalConfig.get_api_url('billing', path)

    @staticmethod
    def _headers(session_id):
        return {'X-Session-ID': session_id}

    def create_session(self, project_uuid=None):
        params = {'project_uuid': project_uuid} if project_uuid else None
        result = self.client.post(self._url('/session/create'), params=params)
        logger.info("Created billing session %s", result.get('session_id'))
        return result

    def cleanup_session(self, session_id):
        logger.info("Cleaning up billing session %s", session_id)
        return self.client.delete(self._url('/session/cleanup'), headers=self._headers(session_id))

    def upload(self, session_id, target, file_name, data, mimetype):
        """Upload one spreadsheet as input or master-data"""
        return self.client.post(
            self._url(f'/upload/{target}'),
            files={'file': (file_name, data, mimetype)},
            headers=self._headers(session_id),
        )

    def list_files(self, session_id):
        """Input, master-data and output listings in one payload"""
        headers = self._headers(session_id)
        return {
            file_type.replace('-', '_'): self.client.get(self._url(f'/files/{file_type}'), headers=headers)
            for file_type in FILE_TYPES
        }

    def delete_file(self, session_id, file_type, filename):
        return self.client.delete(self._url(f'/files/{file_type}/{filename}'), headers=self._headers(session_id))

    def download_file(self, session_id, file_type, filename):
        return self.client.download(self._url(f'/files/download/{file_type}/{filename}'),
                                    default_filename=filename, headers=self._headers(session_id))

    def process(self, session_id, input_files=None):
        logger.info("Processing billing session %s", session_id)
        payload = {'input_files': input_files} if input_files else {}
        return self.client.post(self._url('/process'), json=payload, headers=self._headers(session_id))

    def status(self, session_id):
        headers = self._headers(session_id)
        return {
            'system': self.client.get(self._url('/status'), headers=headers),
            'master_data': self.client.get(self._url('/master-data/status'), headers=headers),
        }

    def health(self):
        return self.client.get(self._url('/health'), timeout=PortalConfig.HEALTH_CHECK_TIMEOUT)
