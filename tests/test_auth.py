
import pytest
from coffee_pickup import create_app
from conftest import BARISTA_EMAIL, INVITE_CODE, PASSWORD


def auth_header(token):
    return {'Authorization': f'Bearer {token}'}


def test_signup_returns_session(client):
    r = client.post('/auth/signup', json={'email': 'Ana@BrewBar.com', 'password': PASSWORD})
    assert r.status_code == 200
    body = r.get_json()
    assert body['user']['email'] == 'ana@brewbar.com'
    assert body['session']['token_type'] == 'bearer'
    assert body['session']['access_token'] != body['session']['refresh_token']
    assert body['isBarista'] is False


def test_static_allow_list_marks_barista(signup):
    assert signup(BARISTA_EMAIL)['isBarista'] is True


def test_signup_twice_fails(client, signup):
    signup('ana@brewbar.com')
    r = client.post('/auth/signup', json={'email': 'ana@brewbar.com', 'password': PASSWORD})
    assert r.status_code == 400
    assert r.get_json()['error'] == 'User already registered'


@pytest.mark.parametrize("body", [
    {'email': 'not-an-email', 'password': PASSWORD},
    {'email': 'ana@brewbar.com', 'password': '123'},
    {'email': 'ana@brewbar.com'},
])
def test_signup_validates_credentials(client, body):
    r = client.post('/auth/signup', json=body)
    assert r.status_code == 400
    assert r.get_json()['reason'] == 'validation_error'


def test_login(client, signup):
    signup('ana@brewbar.com')
    r = client.post('/auth/login', json={'email': 'ana@brewbar.com', 'password': PASSWORD})
    assert r.status_code == 200
    assert r.get_json()['user']['email'] == 'ana@brewbar.com'

    r = client.post('/auth/login', json={'email': 'ana@brewbar.com', 'password': 'wrong-password'})
    assert r.status_code == 401
    r = client.post('/auth/login', json={'email': 'nobody@brewbar.com', 'password': PASSWORD})
    assert r.status_code == 401


def test_refresh(client, signup):
    session = signup('ana@brewbar.com')['session']
    r = client.post('/auth/refresh', json={'refreshToken': session['refresh_token']})
    assert r.status_code == 200
    renewed = r.get_json()['session']
    assert client.get('/auth/me', headers=auth_header(renewed['access_token'])).status_code == 200

    assert client.post('/auth/refresh', json={'refreshToken': 'garbage'}).status_code == 401
    assert client.post('/auth/refresh', json={}).status_code == 400
    r = client.post('/auth/refresh', json={'refreshToken': session['access_token']})
    assert r.status_code == 401


def test_me(client, signup):
    body = signup('ana@brewbar.com')
    r = client.get('/auth/me', headers=auth_header(body['session']['access_token']))
    assert r.get_json() == {
        'user': {'id': body['user']['id'], 'email': 'ana@brewbar.com'},
        'isBarista': False,
    }


def test_me_requires_token(client, signup):
    r = client.get('/auth/me')
    assert r.status_code == 401
    assert r.get_json()['error'] == 'Missing Authorization token'

    refresh_token = signup('ana@brewbar.com')['session']['refresh_token']
    r = client.get('/auth/me', headers=auth_header(refresh_token))
    assert r.status_code == 401
    assert r.get_json()['error'] == 'Invalid or expired token'
    assert client.get('/auth/me', headers={'Authorization': 'Token abc'}).status_code == 401


def test_barista_signup(client):
    body = {'email': 'new@brewbar.com', 'password': PASSWORD, 'inviteCode': INVITE_CODE}
    r = client.post('/auth/barista-signup', json=body)
    assert r.status_code == 200
    assert r.get_json()['isBarista'] is True

    r = client.post('/auth/login', json={'email': 'new@brewbar.com', 'password': PASSWORD})
    assert r.get_json()['isBarista'] is True


def test_barista_signup_wrong_code(client):
    body = {'email': 'new@brewbar.com', 'password': PASSWORD, 'inviteCode': 'guess'}
    r = client.post('/auth/barista-signup', json=body)
    assert r.status_code == 403
    assert r.get_json()['error'] == 'Invalid invite code'
    # No account was created.
    r = client.post('/auth/login', json={'email': 'new@brewbar.com', 'password': PASSWORD})
    assert r.status_code == 401


def test_barista_grant(client, signup):
    token = signup('ana@brewbar.com')['session']['access_token']
    assert client.post('/auth/barista-grant', json={'inviteCode': INVITE_CODE}).status_code == 401
    r = client.post('/auth/barista-grant', json={'inviteCode': 'guess'}, headers=auth_header(token))
    assert r.status_code == 403
    assert client.get('/auth/me', headers=auth_header(token)).get_json()['isBarista'] is False

    r = client.post('/auth/barista-grant', json={'inviteCode': INVITE_CODE}, headers=auth_header(token))
    assert r.get_json() == {'ok': True, 'isBarista': True}
    assert client.get('/auth/me', headers=auth_header(token)).get_json()['isBarista'] is True

    # Granting again is harmless.
    r = client.post('/auth/barista-grant', json={'inviteCode': INVITE_CODE}, headers=auth_header(token))
    assert r.status_code == 200


def test_granted_barista_can_manage_orders(client, signup):
    token = signup('ana@brewbar.com')['session']['access_token']
    client.post('/auth/barista-grant', json={'inviteCode': INVITE_CODE}, headers=auth_header(token))
    r = client.post('/products', headers=auth_header(token), json={
        'name': 'Cortado', 'price': 3.8, 'image': 'img://cortado', 'category': 'coffee',
    })
    assert r.status_code == 201


def test_empty_invite_code_disables_provisioning(app_config):
    app = create_app({**app_config, 'BARISTA_INVITE_CODE': ''})
    with app.test_client() as client:
        body = {'email': 'new@brewbar.com', 'password': PASSWORD, 'inviteCode': 'anything'}
        assert client.post('/auth/barista-signup', json=body).status_code == 403


def test_role_lookup_failure_degrades_to_customer(app_config):
    def broken_lookup(email):
        raise RuntimeError("baristas table unavailable")

    app = create_app({**app_config, 'BARISTA_LOOKUP': broken_lookup})
    with app.test_client() as client:
        r = client.post('/auth/signup', json={'email': 'ana@brewbar.com', 'password': PASSWORD})
        assert r.status_code == 200
        assert r.get_json()['isBarista'] is False
        token = r.get_json()['session']['access_token']
        r = client.get('/auth/me', headers=auth_header(token))
        assert r.status_code == 200
        assert r.get_json()['isBarista'] is False

        r = client.post('/auth/signup', json={'email': BARISTA_EMAIL, 'password': PASSWORD})
        assert r.get_json()['isBarista'] is True


def test_health(client):
    assert client.get('/health').get_json() == {'ok': True}
    assert client.get('/healthz').status_code == 200
