import io

BILLING = '/api/v1/billing'


def _start_session(client, backend, session_id='bill-1'):
    backend.script('POST', f'{BILLING}/session/create', {'session_id': session_id})
    response = client.post('/api/utility-billing/session', json={})
    assert response.status_code == 201
    return session_id


def test_calls_without_session_are_rejected(client, backend):
    for method, url in [('get', '/api/utility-billing/files'), ('post', '/api/utility-billing/process'),
                        ('get', '/api/utility-billing/status'), ('delete', '/api/utility-billing/session')]:
        response = getattr(client, method)(url)
        assert response.status_code == 400
        assert response.get_json()['error'] == 'No active billing session'
    assert backend.calls == []


def test_session_id_travels_as_header(client, backend):
    session_id = _start_session(client, backend)
    client.post('/api/utility-billing/process', json={'input_files': ['jan.xlsx']})

    call = backend.calls[-1]
    assert call['path'] == f'{BILLING}/process'
    assert call['headers'] == {'X-Session-ID': session_id}
    assert call['json'] == {'input_files': ['jan.xlsx']}


def test_upload_rejects_non_excel(client, backend):
    _start_session(client, backend)
    response = client.post('/api/utility-billing/upload/input',
                           data={'file': (io.BytesIO(b'x'), 'readings.csv')},
                           content_type='multipart/form-data')
    assert response.status_code == 400
    assert backend.paths() == [f'{BILLING}/session/create']


def test_upload_master_data(client, backend):
    _start_session(client, backend)
    client.post('/api/utility-billing/upload/master-data',
                data={'file': (io.BytesIO(b'x'), 'tenants.xlsx')},
                content_type='multipart/form-data')
    call = backend.calls[-1]
    assert call['path'] == f'{BILLING}/upload/master-data'
    assert call['files']['file'][0] == 'tenants.xlsx'


def test_files_and_status_are_combined(client, backend):
    _start_session(client, backend)
    backend.script('GET', f'{BILLING}/files/input', {'files': ['jan.xlsx']})
    backend.script('GET', f'{BILLING}/master-data/status', {'loaded': True})

    files = client.get('/api/utility-billing/files').get_json()
    assert set(files) == {'input', 'master_data', 'output'}
    assert files['input'] == {'files': ['jan.xlsx']}

    status = client.get('/api/utility-billing/status').get_json()
    assert status['master_data'] == {'loaded': True}


def test_cleanup_forgets_session(client, backend):
    _start_session(client, backend)
    assert client.delete('/api/utility-billing/session').status_code == 200
    assert client.get('/api/utility-billing/session').get_json() == {'session_id': None}


def test_unknown_file_type(client, backend):
    _start_session(client, backend)
    assert client.delete('/api/utility-billing/files/bogus/x.xlsx').status_code == 404
