from finance_portal.core import BackendError

UUID = '1b4e28ba-2fa1-11d2-883f-0016d3cca427'
PROTECTED = {'uuid': UUID, 'project_name': 'Audit 2026', 'is_protected': True}


def test_list_projects(client, backend):
    backend.script('GET', '/api/projects', {'projects': [], 'total': 0})
    response = client.get('/api/projects?skip=10&limit=5')
    assert response.status_code == 200
    assert backend.calls[0]['params'] == {'skip': 10, 'limit': 5}


def test_blank_search_falls_back_to_list(client, backend):
    client.get('/api/projects/search?q=%20%20')
    assert backend.paths() == ['/api/projects']


def test_search_projects(client, backend):
    client.get('/api/projects/search?q=audit')
    assert backend.calls[0]['path'] == '/api/projects/search'
    assert backend.calls[0]['params'] == {'q': 'audit', 'limit': 20}


def test_create_requires_name(client, backend):
    response = client.post('/api/projects', json={'project_name': '  '})
    assert response.status_code == 400
    assert backend.calls == []


def test_create_omits_empty_optional_fields(client, backend):
    backend.script('POST', '/api/projects', {'uuid': UUID, 'project_name': 'Audit'})
    response = client.post('/api/projects', json={'project_name': 'Audit', 'description': '', 'password': ''})
    assert response.status_code == 201
    assert backend.calls[0]['json'] == {'project_name': 'Audit'}


def test_empty_password_never_reaches_backend(client, backend):
    response = client.post(f'/api/projects/{UUID}/verify', json={'password': ''})
    assert response.status_code == 400
    assert backend.calls == []


def test_wrong_password_is_rejected(client, backend):
    backend.script('POST', f'/api/projects/{UUID}/verify', {'verified': False})
    response = client.post(f'/api/projects/{UUID}/verify', json={'password': 'nope'})
    assert response.status_code == 401
    assert response.get_json()['error'] == 'Invalid password'


def test_protected_project_prompts_until_verified(client, backend):
    backend.script('GET', f'/api/projects/{UUID}', PROTECTED)
    backend.script('POST', f'/api/projects/{UUID}/verify', {'verified': True})

    response = client.get(f'/api/projects/{UUID}')
    assert response.status_code == 403
    assert response.get_json()['password_required'] is True

    assert client.post(f'/api/projects/{UUID}/verify', json={'password': 'secret'}).status_code == 200

    # Same browser session: no second prompt and no second verification call
    response = client.get(f'/api/projects/{UUID}')
    assert response.status_code == 200
    assert response.get_json()['project_name'] == 'Audit 2026'
    assert backend.paths('POST').count(f'/api/projects/{UUID}/verify') == 1


def test_lock_forgets_verification(client, backend):
    backend.script('GET', f'/api/projects/{UUID}', PROTECTED)
    backend.script('POST', f'/api/projects/{UUID}/verify', {'verified': True})
    client.post(f'/api/projects/{UUID}/verify', json={'password': 'secret'})

    client.post(f'/api/projects/{UUID}/lock')
    assert client.get(f'/api/projects/{UUID}').status_code == 403


def test_verification_is_per_browser_session(app, backend):
    backend.script('GET', f'/api/projects/{UUID}', PROTECTED)
    backend.script('POST', f'/api/projects/{UUID}/verify', {'verified': True})

    first, second = app.test_client(), app.test_client()
    first.post(f'/api/projects/{UUID}/verify', json={'password': 'secret'})
    assert first.get(f'/api/projects/{UUID}').status_code == 200
    assert second.get(f'/api/projects/{UUID}').status_code == 403


def test_missing_project(client, backend):
    backend.script('GET', f'/api/projects/{UUID}', BackendError(404, 'HTTP 404', 'Project not found in database'))
    response = client.get(f'/api/projects/{UUID}')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Project not found'


def test_backend_down_maps_to_503(client, backend):
    backend.script('GET', '/api/projects', BackendError(None, 'Backend not reachable'))
    response = client.get('/api/projects')
    assert response.status_code == 503
    assert 'Backend not reachable' in response.get_json()['error']


def test_set_password_accepts_new_password_field(client, backend):
    response = client.post(f'/api/projects/{UUID}/password', json={'new_password': 'pw1'})
    assert response.status_code == 200
    assert backend.calls[0]['json'] == {'password': 'pw1'}


def test_unknown_case_feature(client, backend):
    assert client.get(f'/api/projects/{UUID}/cases/nope').status_code == 404
    assert backend.calls == []


def test_verified_list_follows_session(client, backend):
    backend.script('POST', f'/api/projects/{UUID}/verify', {'verified': True})
    assert client.get('/api/projects/verified').get_json() == {'verified': []}
    client.post(f'/api/projects/{UUID}/verify', json={'password': 'secret'})
    assert client.get('/api/projects/verified').get_json() == {'verified': [UUID]}
