import io
import json

from finance_portal.core import BackendError, DownloadedFile

API = '/api/finance/api'


def _workbooks(*names, **extra):
    data = {'excel_files': [(io.BytesIO(b'x'), name) for name in names]}
    for field, value in extra.items():
        data[field] = (io.BytesIO(b'y'), value) if value.endswith(('.xlsx', '.xls', '.csv')) else value
    return data


def _events(response):
    return [json.loads(chunk[len('data: '):]) for chunk in response.get_data(as_text=True).split('\n\n')
            if chunk.startswith('data: ')]


def test_process_requires_workbooks(client, backend):
    response = client.post('/api/variance/process', data={}, content_type='multipart/form-data')
    assert response.status_code == 400
    assert backend.calls == []


def test_process_rejects_non_excel(client, backend):
    response = client.post('/api/variance/process', data=_workbooks('jan.xlsx', 'notes.pdf'),
                           content_type='multipart/form-data')
    assert response.status_code == 400
    assert 'notes.pdf' in response.get_json()['error']
    assert backend.calls == []


def test_process_forwards_files_and_config(client, backend):
    backend.script('DOWNLOAD', f'{API}/process',
                   DownloadedFile(b'PK', 'variance.xlsx', 'application/vnd.ms-excel'))
    response = client.post('/api/variance/process',
                           data=_workbooks('jan.xlsx', 'feb.xlsx', mapping_file='map.xlsx',
                                           materiality='0.05', comment=''),
                           content_type='multipart/form-data')
    assert response.status_code == 200
    assert response.data == b'PK'
    assert 'variance.xlsx' in response.headers['Content-Disposition']

    call = backend.calls[0]
    assert call['http_method'] == 'POST'
    assert [(field, f[0]) for field, f in call['files']] == [
        ('excel_files', 'jan.xlsx'), ('excel_files', 'feb.xlsx'), ('mapping_file', 'map.xlsx')]
    assert call['data'] == {'materiality': '0.05'}


def test_process_default_filename(client, backend):
    response = client.post('/api/variance/process', data=_workbooks('jan.xlsx'),
                           content_type='multipart/form-data')
    assert 'variance_analysis_python.xlsx' in response.headers['Content-Disposition']


def test_process_blocks_locked_project(client, backend):
    backend.script('GET', '/api/projects/p-1', {'uuid': 'p-1', 'is_protected': True})
    response = client.post('/api/variance/process', data=_workbooks('jan.xlsx', project_uuid='p-1'),
                           content_type='multipart/form-data')
    assert response.status_code == 403
    assert backend.paths('DOWNLOAD') == []


def test_process_backend_error(client, backend):
    backend.script('DOWNLOAD', f'{API}/process', BackendError(422, 'HTTP 422', 'Missing sheet BS'))
    response = client.post('/api/variance/process', data=_workbooks('jan.xlsx'),
                           content_type='multipart/form-data')
    assert response.status_code == 422
    assert response.get_json()['error'] == 'Missing sheet BS'


def test_start_analysis_returns_session(client, backend):
    backend.script('POST', f'{API}/start-analysis', {'session_id': 's-1'})
    response = client.post('/api/variance/start-analysis', data=_workbooks('jan.xlsx'),
                           content_type='multipart/form-data')
    assert response.get_json() == {'session_id': 's-1'}


def test_start_analysis_without_session_id(client, backend):
    backend.script('POST', f'{API}/start-analysis', {})
    response = client.post('/api/variance/start-analysis', data=_workbooks('jan.xlsx'),
                           content_type='multipart/form-data')
    assert response.status_code == 502


def test_log_stream_relays_until_complete(client, backend):
    backend.script('STREAM', f'{API}/logs/s-1', [
        'data: {"type": "log", "message": "Reading workbook"}',
        '',
        ': keepalive',
        'data: {"type": "progress", "percentage": 50, "message": "Analysing"}',
        'data: {"type": "complete"}',
        'data: {"type": "log", "message": "after the end"}',
    ])
    response = client.get('/api/variance/logs/s-1')
    assert response.mimetype == 'text/event-stream'
    assert response.headers['Cache-Control'] == 'no-cache'
    assert [e['type'] for e in _events(response)] == ['log', 'progress', 'complete']
    assert ': heartbeat' in response.get_data(as_text=True)


def test_log_stream_unknown_session(client, backend):
    backend.script('STREAM', f'{API}/logs/nope', BackendError(404, 'HTTP 404', 'Session not found'))
    response = client.get('/api/variance/logs/nope')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Session not found'


def test_log_stream_broken_mid_way(client, backend):
    def broken():
        yield 'data: {"type": "log", "message": "started"}'
        raise BackendError(None, 'Backend stream interrupted')

    backend.script('STREAM', f'{API}/logs/s-1', lambda **kwargs: broken())
    events = _events(client.get('/api/variance/logs/s-1'))
    assert events[0]['type'] == 'log'
    assert events[-1] == {'type': 'error', 'message': 'Backend stream interrupted'}


def test_download_result(client, backend):
    response = client.get('/api/variance/download/s-1')
    assert response.status_code == 200
    assert backend.calls[0]['path'] == f'{API}/download/s-1'
    assert 'ai_variance_analysis_s-1.xlsx' in response.headers['Content-Disposition']


def test_debug_files(client, backend):
    backend.script('GET', f'{API}/debug/list/s-1', {'files': [{'key': 's-1/prompt.txt'}]})
    assert client.get('/api/variance/debug/s-1/files').get_json() == {'files': [{'key': 's-1/prompt.txt'}]}

    response = client.get('/api/variance/debug/file/s-1/prompt.txt')
    assert response.status_code == 200
    assert backend.calls[-1]['path'] == f'{API}/debug/s-1/prompt.txt'
    assert 'prompt.txt' in response.headers['Content-Disposition']
