"""
Utility Billing Component
"""
from .routes import utility_billing_bp, init_utility_billing
from .service import UtilityBillingService

__all__ = ['utility_billing_bp', 'init_utility_billing', 'UtilityBillingService']
