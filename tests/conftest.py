"""Test configuration and fixtures for the portfolio API tests."""

import base64
import json
from http import HTTPStatus

import pytest

from app import create_app
from extensions import db
from models import User
from utils.security import RATE_LIMIT_REQUESTS, hash_password


ADMIN_USERNAME = 'admin'
ADMIN_PASSWORD = 'admin-password'
USER_USERNAME = 'visitor'
USER_PASSWORD = 'visitor-password'

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 32
PNG_DATA_URI = 'data:image/png;base64,' + base64.b64encode(PNG_BYTES).decode('ascii')


# ==============================================================================
# Payload helpers
# ==============================================================================

def project_payload(**overrides):
    payload = {
        'title': 'My App',
        'description': 'A great application',
        'image': 'https://a.test/x.png',
        'category': 'backend',
        'technologies': 'Go, SQL',
        'tags': 'web',
        'link': 'https://a.test',
    }
    payload.update(overrides)
    return payload


def blog_post_payload(**overrides):
    payload = {
        'title': 'Hello World',
        'summary': 'A short summary of the post',
        'content': 'The full content of the blog post.',
        'featuredImage': 'https://a.test/cover.png',
        'category': 'tech',
        'tags': 'python, flask',
    }
    payload.update(overrides)
    return payload


def contact_payload(**overrides):
    payload = {
        'name': 'Jane Doe',
        'email': 'jane@gmail.com',
        'subject': 'Project inquiry',
        'message': 'I would like to talk about a project.',
    }
    payload.update(overrides)
    return payload


def create_user(app, username, password, is_admin=False):
    """Insert a user and return its id."""
    with app.app_context():
        user = User(username=username, password_hash=hash_password(password), is_admin=is_admin)
        db.session.add(user)
        db.session.commit()
        return user.id


def login(client, username, password):
    return client.post('/api/auth/login', json={'username': username, 'password': password})


# ==============================================================================
# Shared pytest fixtures
# ==============================================================================

@pytest.fixture
def upload_dir(tmp_path):
    """Directory receiving uploads during a test."""
    return tmp_path / 'uploads'


@pytest.fixture
def app(upload_dir):
    """Application bound to a fresh in-memory database."""
    app = create_app('testing')
    app.config['UPLOAD_FOLDER'] = str(upload_dir)
    RATE_LIMIT_REQUESTS.clear()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Pushed application context for tests calling services directly."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_id(app):
    return create_user(app, ADMIN_USERNAME, ADMIN_PASSWORD, is_admin=True)


@pytest.fixture
def admin_client(app, admin_id):
    """Test client holding an admin session."""
    client = app.test_client()
    response = login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
    assert response.status_code == 200
    return client


@pytest.fixture
def user_client(app):
    """Test client holding a session of a user without admin rights."""
    create_user(app, USER_USERNAME, USER_PASSWORD, is_admin=False)
    client = app.test_client()
    response = login(client, USER_USERNAME, USER_PASSWORD)
    assert response.status_code == 200
    return client


# ==============================================================================
# requests-compatible adapter over the Flask test client
# ==============================================================================

class FlaskResponse:
    """The subset of ``requests.Response`` the API client reads."""

    def __init__(self, response):
        self.status_code = response.status_code
        self.text = response.get_data(as_text=True)
        self.reason = HTTPStatus(response.status_code).phrase
        self.ok = response.status_code < 400

    def json(self):
        return json.loads(self.text)


class FlaskSession:
    """Stands in for ``requests.Session``; records every call made."""

    def __init__(self, test_client):
        self.test_client = test_client
        self.calls = []

    def request(self, method, url, headers=None, data=None, timeout=None):
        self.calls.append((method, url))
        response = self.test_client.open(url, method=method, headers=headers, data=data)
        return FlaskResponse(response)

    def count(self, method, url):
        return self.calls.count((method, url))


@pytest.fixture
def flask_session(app):
    return FlaskSession(app.test_client())
