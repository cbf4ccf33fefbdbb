
import pytest
from coffee_pickup import create_app

BARISTA_EMAIL = "lead@brewbar.com"
INVITE_CODE = "beans-and-more"
PASSWORD = "secret123"


@pytest.fixture()
def app_config(tmp_path):
    return {
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path}/test.db",  # use sqlite for tests
        'SECRET_KEY': 'test-secret',
        'BARISTA_EMAILS': frozenset({BARISTA_EMAIL}),
        'BARISTA_INVITE_CODE': INVITE_CODE,
    }


@pytest.fixture()
def app(app_config):
    return create_app(app_config)


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture()
def signup(client):
    def _signup(email, password=PASSWORD):
        r = client.post('/auth/signup', json={'email': email, 'password': password})
        assert r.status_code == 200, r.get_json()
        return r.get_json()
    return _signup


def bearer(session):
    return {'Authorization': f"Bearer {session['session']['access_token']}"}


@pytest.fixture()
def headers_for(signup):
    def _headers_for(email):
        return bearer(signup(email))
    return _headers_for


@pytest.fixture()
def barista_headers(headers_for):
    return headers_for(BARISTA_EMAIL)


@pytest.fixture()
def customer_headers(headers_for):
    return headers_for("ana@brewbar.com")


@pytest.fixture()
def add_product(client, barista_headers):
    def _add_product(name, category="coffee", **fields):
        body = {'name': name, 'price': 4.0, 'image': 'img://cup', 'category': category, **fields}
        r = client.post('/products', json=body, headers=barista_headers)
        assert r.status_code == 201, r.get_json()
        return r.get_json()
    return _add_product
