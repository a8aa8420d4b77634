"""
Excel Comparison Component
"""
from .routes import excel_comparison_bp, init_excel_comparison
from .service import ExcelComparisonService

__all__ = ['excel_comparison_bp', 'init_excel_comparison', 'ExcelComparisonService']
