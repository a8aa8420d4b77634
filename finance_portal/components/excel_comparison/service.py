"""
Excel Comparison Service
"""
import logging

from finance_portal.components import register_component
from finance_portal.config.settings import PortalConfig
from finance_portal.core import get_backend_client

logger = logging.getLogger(__name__)


@register_component('excel_comparison')
class ExcelComparisonService:
    """Compare two versions of a workbook on the backend"""

    title = 'Excel Comparison'
    description = 'Highlight what changed between a previous and a current workbook'
    path = '/excel-comparison'

    @property
    def client(self):
        return get_backend_client()

    def compare(self, old_file, new_file):
        """old_file and new_file are (name, bytes, mimetype) tuples"""
        logger.info("Comparing %s against %s", old_file[0], new_file[0])
        return self.client.post(
            PortalConfig.get_api_url('comparison', '/compare'),
            files={'old_file': old_file, 'new_file': new_file},
        )

    def download(self, filename):
        return self.client.download(PortalConfig.get_api_url('comparison', f'/download/{filename}'),
                                    default_filename=filename)
