"""
Projects Service
Project CRUD and password verification against the backend
"""
import logging

from finance_portal.components import register_component
from finance_portal.config.settings import PortalConfig
from finance_portal.core import get_backend_client

logger = logging.getLogger(__name__)


@register_component('projects')
class ProjectsService:
    """Service for the Projects component"""

    title = 'Project Management'
    description = 'Create, protect and organise projects that group uploaded files and results'
    path = '/projects'

    @property
    def client(self):
        return get_backend_client()

    def _url(self, path=''):
        return PortalConfig.get_api_url('projects', path)

    def list_projects(self, skip=0, limit=PortalConfig.PROJECT_LIST_LIMIT):
        """Paginated project list"""
        return self.client.get(self._url(), params={'skip': skip, 'limit': limit})

    def search_projects(self, query, limit=PortalConfig.PROJECT_SEARCH_LIMIT):
        """Search projects by name"""
        return self.client.get(self._url('/search'), params={'q': query, 'limit': limit})

    def get_project(self, project_uuid):
        return self.client.get(self._url(f'/{project_uuid}'))

    def create_project(self, project_name, description=None, password=None):
        """Create a project; empty optional fields are not sent"""
        payload = {'project_name': project_name}
        if description:
            payload['description'] = description
        if password:
            payload['password'] = password
        logger.info("Creating project %r (protected=%s)", project_name, bool(password))
        return self.client.post(self._url(), json=payload)

    def update_project(self, project_uuid, project_name, description=None, current_password=None):
        payload = {'project_name': project_name, 'description': description}
        if current_password:
            payload['current_password'] = current_password
        return self.client.put(self._url(f'/{project_uuid}'), json=payload)

    def delete_project(self, project_uuid, current_password=None):
        payload = {'current_password': current_password} if current_password else {}
        logger.info("Deleting project %s", project_uuid)
        return self.client.post(self._url(f'/{project_uuid}/delete'), json=payload)

    def set_password(self, project_uuid, password, current_password=None):
        """Set or change a project password"""
        payload = {'password': password}
        if current_password:
            payload['current_password'] = current_password
        return self.client.post(self._url(f'/{project_uuid}/password'), json=payload)

    def verify_password(self, project_uuid, password):
        """Ask the backend whether the password is correct"""
        result = self.client.post(self._url(f'/{project_uuid}/verify'), json={'password': password})
        return bool(result.get('verified'))

    def get_cases(self, project_uuid, feature=None):
        """Per-feature history lists for a project"""
        path = f'/{project_uuid}/cases'
        if feature:
            path = f'{path}/{feature}'
        return self.client.get(self._url(path))

    def get_workspace(self, project_uuid, project=None):
        """Project, its cases and its bank statement sessions in one payload"""
        project = project or self.get_project(project_uuid)
        return {
            'project': project,
            'cases': self.get_cases(project_uuid),
            'bank_statements': self.get_cases(project_uuid, 'bank-statement'),
        }
