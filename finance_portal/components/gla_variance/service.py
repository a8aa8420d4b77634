"""
GLA Variance Service
"""
import logging

from finance_portal.components import register_component
from finance_portal.config.settings import PortalConfig
from finance_portal.core import get_backend_client

logger = logging.getLogger(__name__)


@register_component('gla_variance')
class GLAVarianceService:
    """GLA variance analysis on the FP&A backend"""

    title = 'GLA Variance Analysis'
    description = 'Analyse gross leasable area movements between periods'
    path = '/gla-variance'

    @property
    def client(self):
        return get_backend_client()

    def analyze(self, file_name, data, mimetype, project_uuid=None):
        logger.info("Running GLA variance analysis on %s", file_name)
        form = {'project_uuid': project_uuid} if project_uuid else {}
        return self.client.post(
            PortalConfig.get_api_url('fpa', '/gla-variance/analyze'),
            files={'file': (file_name, data, mimetype)},
            data=form,
        )

    def download(self, filename):
        return self.client.download(PortalConfig.get_api_url('fpa', f'/gla-variance/download/{filename}'),
                                    default_filename=filename)
