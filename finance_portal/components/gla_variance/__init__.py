"""
GLA Variance Component
"""
from .routes import gla_variance_bp, init_gla_variance
from .service import GLAVarianceService

__all__ = ['gla_variance_bp', 'init_gla_variance', 'GLAVarianceService']
