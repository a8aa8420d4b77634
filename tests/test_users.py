USERS = '/api/auth/admin/users'
TOKEN = {'Authorization': 'Bearer admin-token'}


def test_list_users_pages_and_forwards_token(client, backend):
    backend.script('GET', USERS, {'users': [{'uuid': 'u1'}], 'total': 21})
    body = client.get('/api/admin/users?search=ann&status=inactive', headers=TOKEN).get_json()

    assert body['total'] == 21
    assert body['total_pages'] == 3
    call = backend.calls[0]
    assert call['headers'] == TOKEN
    assert call['params'] == {'page': 1, 'page_size': 10, 'search': 'ann', 'is_active': False}


def test_unknown_status_filter(client, backend):
    assert client.get('/api/admin/users?status=banned').status_code == 400
    assert backend.calls == []


def test_update_role(client, backend):
    client.put('/api/admin/users/u1/role', json={'role': 'admin'}, headers=TOKEN)
    assert backend.calls[0]['path'] == f'{USERS}/u1/role'
    assert backend.calls[0]['json'] == {'role': 'admin'}


def test_update_role_rejects_unknown_role(client, backend):
    assert client.put('/api/admin/users/u1/role', json={'role': 'root'}).status_code == 400
    assert backend.calls == []


def test_update_status(client, backend):
    client.put('/api/admin/users/u1/status', json={'is_active': False}, headers=TOKEN)
    assert backend.calls[0]['json'] == {'is_active': False}


def test_revoke_sessions(client, backend):
    response = client.post('/api/admin/users/u1/revoke-sessions', headers=TOKEN)
    assert response.status_code == 200
    assert backend.calls[0]['path'] == f'{USERS}/u1/revoke-sessions'
