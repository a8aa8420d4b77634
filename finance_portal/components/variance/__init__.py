"""
Variance Analysis Component
"""
from .routes import variance_bp, init_variance
from .service import VarianceService
from .sse_handler import VarianceLogStream

__all__ = ['variance_bp', 'init_variance', 'VarianceService', 'VarianceLogStream']
