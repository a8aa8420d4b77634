from .main_routes import build_breadcrumb, main_bp

__all__ = ['main_bp', 'build_breadcrumb']
