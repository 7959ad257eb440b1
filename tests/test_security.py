"""
Tests for utils.security and utils.notifications.
"""

import json
import threading

import pytest

from utils import notifications
from utils.errors import TooManyRequests, Unauthorized
from utils.security import (
    INVALID_CREDENTIALS_MESSAGE,
    authenticate,
    check_rate_limit,
    enforce_rate_limit,
    get_client_ip,
    log_audit_event,
)

from tests.conftest import create_user


class TestRateLimit:
    """Tests for check_rate_limit() / enforce_rate_limit()."""

    def test_disabled_always_allows(self, app):
        with app.test_request_context('/'):
            assert all(check_rate_limit('contact') for _ in range(50))

    def test_limit_per_ip_and_endpoint(self, app):
        app.config.update(RATE_LIMIT_ENABLED=True, RATE_LIMIT_MAX_REQUESTS=2)

        with app.test_request_context('/', environ_base={'REMOTE_ADDR': '10.0.0.1'}):
            assert check_rate_limit('contact')
            assert check_rate_limit('contact')
            assert not check_rate_limit('contact')
            assert check_rate_limit('login')
            with pytest.raises(TooManyRequests):
                enforce_rate_limit('contact')

        with app.test_request_context('/', environ_base={'REMOTE_ADDR': '10.0.0.2'}):
            assert check_rate_limit('contact')

    def test_window_expiry(self, app, monkeypatch):
        app.config.update(RATE_LIMIT_ENABLED=True, RATE_LIMIT_MAX_REQUESTS=1, RATE_LIMIT_WINDOW=60)
        now = [1000.0]
        monkeypatch.setattr('utils.security.time.time', lambda: now[0])

        with app.test_request_context('/'):
            assert check_rate_limit('contact')
            assert not check_rate_limit('contact')
            now[0] += 61
            assert check_rate_limit('contact')


class TestClientIp:

    def test_forwarded_for_takes_first_hop(self, app):
        headers = {'X-Forwarded-For': '203.0.113.7, 10.0.0.1'}
        with app.test_request_context('/', headers=headers):
            assert get_client_ip() == '203.0.113.7'

    def test_remote_addr(self, app):
        with app.test_request_context('/', environ_base={'REMOTE_ADDR': '192.0.2.1'}):
            assert get_client_ip() == '192.0.2.1'


class TestAuthenticate:

    def test_valid_credentials(self, app):
        user_id = create_user(app, 'owner', 'correct-password', is_admin=True)
        with app.app_context():
            assert authenticate('owner', 'correct-password').id == user_id

    @pytest.mark.parametrize('username, password', [
        ('owner', 'wrong-password'),
        ('ghost', 'correct-password'),
    ])
    def test_failures_share_one_message(self, app, username, password):
        create_user(app, 'owner', 'correct-password')
        with app.app_context():
            with pytest.raises(Unauthorized) as exc_info:
                authenticate(username, password)

        assert exc_info.value.message == INVALID_CREDENTIALS_MESSAGE


class TestAuditLog:

    def test_events_are_appended_to_file(self, app, tmp_path):
        audit_file = tmp_path / 'logs' / 'audit.json'
        app.config['AUDIT_LOG_FILE'] = str(audit_file)

        with app.test_request_context('/'):
            log_audit_event('login', username='owner')
            log_audit_event('logout', username='owner', details='manual')

        with open(audit_file, encoding='utf-8') as f:
            events = json.load(f)
        assert [e['event'] for e in events] == ['login', 'logout']
        assert events[1]['details'] == 'manual'

    def test_without_file_only_logs(self, app):
        assert app.config['AUDIT_LOG_FILE'] is None

        with app.test_request_context('/'):
            log_audit_event('login', username='owner')

    def test_login_is_audited(self, app, client, tmp_path):
        audit_file = tmp_path / 'audit.json'
        app.config['AUDIT_LOG_FILE'] = str(audit_file)
        create_user(app, 'owner', 'correct-password', is_admin=True)

        client.post('/api/auth/login', json={'username': 'owner', 'password': 'bad-password'})
        client.post('/api/auth/login', json={'username': 'owner', 'password': 'correct-password'})

        with open(audit_file, encoding='utf-8') as f:
            assert [e['event'] for e in json.load(f)] == ['login_failed', 'login_success']


class TestAdminNotification:
    """Tests for send_admin_notification()."""

    def test_not_configured(self, ctx):
        assert notifications.send_admin_notification('Subject', 'Text') is False

    def test_posts_to_telegram(self, ctx, monkeypatch):
        ctx.config.update(ADMIN_TELEGRAM_BOT_TOKEN='123:abc', ADMIN_TELEGRAM_CHAT_ID='42')
        calls = []
        done = threading.Event()

        class FakeResponse:
            status_code = 200

        def fake_post(url, json=None, timeout=None):
            calls.append((url, json))
            done.set()
            return FakeResponse()

        monkeypatch.setattr(notifications.requests, 'post', fake_post)

        assert notifications.send_admin_notification('New Contact Message', 'Hello') is True
        assert done.wait(timeout=5)
        url, payload = calls[0]
        assert url == 'https://api.telegram.org/bot123:abc/sendMessage'
        assert payload['chat_id'] == '42'
        assert 'New Contact Message' in payload['text']

    def test_telegram_failure_is_logged_not_raised(self, ctx, monkeypatch):
        ctx.config.update(ADMIN_TELEGRAM_BOT_TOKEN='123:abc', ADMIN_TELEGRAM_CHAT_ID='42')
        done = threading.Event()

        def failing_post(url, json=None, timeout=None):
            done.set()
            raise notifications.requests.ConnectionError('offline')

        monkeypatch.setattr(notifications.requests, 'post', failing_post)

        assert notifications.send_admin_notification('Subject', 'Text') is True
        assert done.wait(timeout=5)
