"""
User Administration Component
"""
from .routes import users_bp, init_users
from .service import UsersService

__all__ = ['users_bp', 'init_users', 'UsersService']
