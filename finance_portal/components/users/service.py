"""
User Administration Service
Admin calls to the auth backend, made with the caller's own bearer token
"""
import logging
import math

from finance_portal.components import register_component
from finance_portal.config.settings import PortalConfig
from finance_portal.core import get_backend_client

logger = logging.getLogger(__name__)

USER_STATUSES = ('', 'active', 'inactive')
USER_ROLES = ('admin', 'user')


@register_component('users')
class UsersService:
    """Service for the admin user management component"""

    title = 'User Management'
    description = 'Manage user roles, account status and sessions'
    path = '/admin/users'

    @property
    def client(self):
        return get_backend_client()

    def _url(self, path):
        return PortalConfig.get_api_url('auth', f'/admin/users{path}')

    @staticmethod
    def _headers(authorization):
        return {'Authorization': authorization} if authorization else {}

    def list_users(self, authorization, page=1, page_size=PortalConfig.ADMIN_USERS_PAGE_SIZE,
                   search='', role='', status=''):
        """One page of users plus the page count"""
        params = {'page': page, 'page_size': page_size}
        if search:
            params['search'] = search
        if role:
            params['role'] = role
        if status:
            params['is_active'] = status == 'active'

        result = self.client.get(self._url(''), params=params, headers=self._headers(authorization),
                                 timeout=PortalConfig.AUTH_API_TIMEOUT)
        total = result.get('total', 0)
        return {
            'users': result.get('users', []),
            'total': total,
            'page': page,
            'page_size': page_size,
            'total_pages': math.ceil(total / page_size) if page_size else 0,
        }

    def update_role(self, authorization, user_uuid, role):
        logger.info("Changing role of user %s to %s", user_uuid, role)
        return self.client.put(self._url(f'/{user_uuid}/role'), json={'role': role},
                               headers=self._headers(authorization), timeout=PortalConfig.AUTH_API_TIMEOUT)

    def update_status(self, authorization, user_uuid, is_active):
        logger.info("Setting user %s active=%s", user_uuid, is_active)
        return self.client.put(self._url(f'/{user_uuid}/status'), json={'is_active': is_active},
                               headers=self._headers(authorization), timeout=PortalConfig.AUTH_API_TIMEOUT)

    def revoke_sessions(self, authorization, user_uuid):
        logger.info("Revoking all sessions of user %s", user_uuid)
        return self.client.post(self._url(f'/{user_uuid}/revoke-sessions'),
                                headers=self._headers(authorization), timeout=PortalConfig.AUTH_API_TIMEOUT)
