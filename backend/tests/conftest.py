import os
import sys
import pytest

# Ensure the backend root (containing the `playkers` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

import httpx

from playkers import create_app, db, socketio
from playkers.client import PlaykersClient


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    INVITATION_TTL_DAYS = 7
    PUBLIC_BASE_URL = 'http://playkers.test'
    ADMIN_EMAIL = ''
    CORS_ORIGINS = []


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import playkers.models  # noqa: F401
        db.create_all()
    # Each request pushes its own context, so `g` (and the logged-in user) is per request
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


def register(test_client, email, password='password', **extra):
    payload = {'email': email, 'password': password, 'firstName': email.split('@')[0].title(), **extra}
    res = test_client.post('/api/auth/register', json=payload)
    assert res.status_code == 201, res.get_json()
    return res.get_json()['user']


@pytest.fixture()
def make_user(flask_app):
    """Register a user on a fresh test client; returns ``(user, logged_in_client)``."""
    def _make(email, **extra):
        test_client = flask_app.test_client()
        user = register(test_client, email, **extra)
        return user, test_client
    return _make


@pytest.fixture()
def venue_owner(flask_app, make_user):
    from playkers.models import Venue
    owner, owner_client = make_user('owner@playkers.dev')
    with flask_app.app_context():
        venue = Venue(name='Central Turf', city='Chennai', owner_id=owner['id'])
        db.session.add(venue)
        db.session.commit()
        venue_id = venue.id
    return owner, owner_client, venue_id


@pytest.fixture()
def api(flask_app):
    """PlaykersClient talking to the app in-process over WSGI."""
    transport = httpx.WSGITransport(app=flask_app)
    api_client = PlaykersClient(base_url='http://testserver', transport=transport)
    yield api_client
    api_client.close()
