"""
Main page routes for the portal
"""
from datetime import datetime

from flask import Blueprint, render_template

from finance_portal.components import registry
from finance_portal.config.settings import PortalConfig

# Create main blueprint
main_bp = Blueprint('main', __name__)


def build_breadcrumb(*items):
    """Breadcrumb trail starting at Home

    items are (label, href) pairs; the last item is the current page and is
    rendered without a link.
    """
    trail = [{'label': 'Home', 'href': '/'}]
    trail.extend({'label': label, 'href': href} for label, href in items)
    trail[-1] = {'label': trail[-1]['label'], 'href': None}
    return trail


@main_bp.route('/')
def index():
    """Portal landing page"""
    return render_template('index.html',
                           features=registry.describe(),
                           breadcrumb=build_breadcrumb(),
                           api_base_url=PortalConfig.API_BASE_URL,
                           current_time=datetime.now())


@main_bp.route('/api/features')
def api_features():
    """Feature components with a landing page"""
    return {'features': registry.describe()}
