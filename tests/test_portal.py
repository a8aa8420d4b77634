import logging

from finance_portal.core import system_logs
from finance_portal.routes import build_breadcrumb


def test_breadcrumb_last_item_has_no_link():
    trail = build_breadcrumb(('Projects', '/projects'), ('Audit 2026', '/projects/1'))
    assert [c['label'] for c in trail] == ['Home', 'Projects', 'Audit 2026']
    assert trail[1]['href'] == '/projects'
    assert trail[-1]['href'] is None


def test_index_lists_features(client):
    response = client.get('/')
    assert response.status_code == 200
    assert b'Bank Statement Parser' in response.data
    assert b'Utility Billing' in response.data


def test_features_endpoint(client):
    names = {f['name'] for f in client.get('/api/features').get_json()['features']}
    assert {'projects', 'bank_statements', 'utility_billing', 'excel_comparison',
            'gla_variance', 'variance', 'users'} <= names


def test_logs_are_buffered_and_filtered(client):
    system_logs.clear()
    logger = logging.getLogger('finance_portal.test')
    logger.warning('disk almost full')
    logger.error('parser crashed')

    errors = client.get('/api/logs?level=ERROR').get_json()
    assert [log['message'] for log in errors] == ['parser crashed']

    latest = client.get('/api/logs?limit=1').get_json()
    assert len(latest) == 1


def test_backend_status_before_first_check(client):
    body = client.get('/api/backend/status').get_json()
    assert body == {'monitoring': False, 'services': {}}


def test_components_are_registered():
    from finance_portal.components import registry
    from finance_portal.components.bank_statements import BankStatementsService

    assert registry.get_component('bank_statements') is BankStatementsService
    assert registry.get_component('missing') is None
