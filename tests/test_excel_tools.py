import io

from finance_portal.core import BackendError


def _multipart(**files):
    return {field: (io.BytesIO(b'x'), name) for field, name in files.items()}


def test_compare_requires_both_files(client, backend):
    response = client.post('/api/excel-comparison/compare', data=_multipart(old_file='jan.xlsx'),
                           content_type='multipart/form-data')
    assert response.status_code == 400
    assert backend.calls == []


def test_compare_rejects_non_excel(client, backend):
    response = client.post('/api/excel-comparison/compare',
                           data=_multipart(old_file='jan.xlsx', new_file='feb.pdf'),
                           content_type='multipart/form-data')
    assert response.status_code == 400
    assert backend.calls == []


def test_compare_forwards_both_files(client, backend):
    backend.script('POST', '/api/compare', {'output_file': 'diff.xlsx'})
    response = client.post('/api/excel-comparison/compare',
                           data=_multipart(old_file='jan.xlsx', new_file='feb.xlsx'),
                           content_type='multipart/form-data')
    assert response.get_json() == {'output_file': 'diff.xlsx'}
    files = backend.calls[0]['files']
    assert files['old_file'][0] == 'jan.xlsx'
    assert files['new_file'][0] == 'feb.xlsx'


def test_compare_backend_error_detail(client, backend):
    backend.script('POST', '/api/compare', BackendError(422, 'HTTP 422', 'Sheets do not match'))
    response = client.post('/api/excel-comparison/compare',
                           data=_multipart(old_file='jan.xlsx', new_file='feb.xlsx'),
                           content_type='multipart/form-data')
    assert response.status_code == 422
    assert response.get_json()['error'] == 'Sheets do not match'


def test_comparison_download(client, backend):
    response = client.get('/api/excel-comparison/download/diff.xlsx')
    assert response.status_code == 200
    assert backend.calls[0]['path'] == '/api/download/diff.xlsx'


def test_gla_analyze(client, backend):
    backend.script('POST', '/api/fpa/gla-variance/analyze', {'output_file': 'gla.xlsx'})
    response = client.post('/api/gla-variance/analyze', data=_multipart(file='gla.xlsx'),
                           content_type='multipart/form-data')
    assert response.status_code == 200
    assert backend.calls[0]['data'] == {}


def test_gla_rejects_non_excel(client, backend):
    response = client.post('/api/gla-variance/analyze', data=_multipart(file='gla.csv'),
                           content_type='multipart/form-data')
    assert response.status_code == 400
    assert backend.calls == []


def test_gla_server_error_maps_to_502(client, backend):
    backend.script('POST', '/api/fpa/gla-variance/analyze', BackendError(500, 'HTTP 500'))
    response = client.post('/api/gla-variance/analyze', data=_multipart(file='gla.xlsx'),
                           content_type='multipart/form-data')
    assert response.status_code == 502


def test_gla_download(client, backend):
    client.get('/api/gla-variance/download/gla.xlsx')
    assert backend.calls[0]['path'] == '/api/fpa/gla-variance/download/gla.xlsx'
