"""
Projects Component
Handles project management and the project password gate
"""
from .routes import projects_bp, init_projects, fetch_gated_project
from .service import ProjectsService

__all__ = ['projects_bp', 'init_projects', 'fetch_gated_project', 'ProjectsService']
