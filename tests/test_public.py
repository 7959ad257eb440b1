"""
Tests for the public read API, visitor submissions and app-level behaviour.
"""

import pytest

from extensions import db
from models import Experience, SiteContent, SocialProfile
from utils.data import seed_default_content

from tests.conftest import contact_payload, project_payload


class TestPublicLists:
    """Read-only collection routes."""

    @pytest.mark.parametrize('path', [
        '/api/projects',
        '/api/experiences',
        '/api/testimonials',
        '/api/skills',
        '/api/social-profiles',
        '/api/content',
        '/api/blog/posts',
        '/api/languages',
    ])
    def test_empty_collections(self, client, path):
        response = client.get(path)

        assert response.status_code == 200
        assert response.get_json() == []

    @pytest.mark.parametrize('path', [
        '/api/projects/1',
        '/api/experiences/1',
        '/api/testimonials/1',
        '/api/skills/1',
        '/api/social-profiles/1',
        '/api/blog/posts/1',
        '/api/content/hero/name',
        '/api/social-profiles/platform/github',
    ])
    def test_missing_rows_are_404(self, client, path):
        response = client.get(path)

        assert response.status_code == 404
        assert 'message' in response.get_json()

    def test_public_routes_are_read_only(self, client):
        assert client.post('/api/projects', json=project_payload()).status_code == 405
        assert client.delete('/api/projects/1').status_code == 405

    def test_category_filter(self, admin_client, client):
        admin_client.post('/api/admin/projects', json=project_payload())
        admin_client.post('/api/admin/projects', json=project_payload(title='Model Zoo', category='ml'))

        assert [p['title'] for p in client.get('/api/projects?category=ml').get_json()] == ['Model Zoo']
        assert len(client.get('/api/projects').get_json()) == 2

    def test_platform_filter_is_case_insensitive(self, admin_client, client):
        admin_client.post('/api/admin/social-profiles', json={
            'platform': 'linkedin', 'username': 'jane', 'profileUrl': 'https://www.linkedin.com/in/jane/'})

        assert len(client.get('/api/social-profiles?platform=LinkedIn').get_json()) == 1
        assert client.get('/api/social-profiles?platform=github').get_json() == []

    def test_blog_posts_newest_first(self, admin_client, client):
        for title in ('Older post title', 'Newer post title'):
            admin_client.post('/api/admin/blog/posts', json={
                'title': title, 'summary': 'A short summary of the post',
                'content': 'The full content of the blog post.',
                'featuredImage': 'https://a.test/cover.png', 'category': 'tech'})

        titles = [p['title'] for p in client.get('/api/blog/posts').get_json()]

        assert titles == ['Newer post title', 'Older post title']


class TestSeedContent:
    """Default content inserted into empty tables."""

    def test_seed_fills_empty_tables_once(self, ctx, client):
        created = seed_default_content()

        assert created > 0
        assert seed_default_content() == 0
        assert SiteContent.query.filter_by(section='hero', key='name').count() == 1
        assert Experience.query.count() > 0
        assert client.get('/api/content/hero').status_code == 200

    def test_seed_keeps_existing_rows(self, ctx):
        db.session.add(SocialProfile(platform='github', username='me', profile_url='https://github.com/me'))
        db.session.commit()

        seed_default_content()

        assert SocialProfile.query.count() == 1


class TestVisitorSubmissions:
    """Rate limiting and notifications of the public forms."""

    def test_contact_rate_limit(self, app, client):
        app.config.update(RATE_LIMIT_ENABLED=True, RATE_LIMIT_MAX_REQUESTS=2)

        statuses = [client.post('/api/contact', json=contact_payload()).status_code for _ in range(3)]

        assert statuses == [201, 201, 429]

    def test_rate_limit_is_per_endpoint(self, app, client):
        app.config.update(RATE_LIMIT_ENABLED=True, RATE_LIMIT_MAX_REQUESTS=1)

        assert client.post('/api/contact', json=contact_payload()).status_code == 201
        assert client.post('/api/newsletter/subscribe', json={'email': 'fan@gmail.com'}).status_code == 201
        assert client.post('/api/contact', json=contact_payload()).status_code == 429

    def test_contact_notifies_admin(self, app, client, monkeypatch):
        sent = []
        monkeypatch.setattr('blueprints.public.routes.send_admin_notification',
                            lambda subject, text: sent.append((subject, text)) or True)

        client.post('/api/contact', json=contact_payload(name='<b>Eve</b>'))

        assert len(sent) == 1
        assert sent[0][0] == 'New Contact Message'
        assert '&lt;b&gt;Eve&lt;/b&gt;' in sent[0][1]

    def test_visitors_cannot_subscribe_inactive(self, client):
        response = client.post('/api/newsletter/subscribe', json={'email': 'fan@gmail.com', 'isActive': False})

        assert response.get_json()['subscriber']['isActive'] is True


class TestApplication:
    """Error handling, headers and maintenance commands."""

    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json()['status'] == 'ok'

    def test_unknown_api_route_is_json_404(self, client):
        response = client.get('/api/does-not-exist')

        assert response.status_code == 404
        assert 'message' in response.get_json()

    def test_wrong_method_is_json_405(self, client):
        response = client.put('/api/contact', json={})

        assert response.status_code == 405
        assert 'message' in response.get_json()

    def test_security_headers(self, client):
        response = client.get('/health')

        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert 'Content-Security-Policy' in response.headers

    def test_unexpected_errors_are_generic_500(self, app):
        @app.route('/api/boom')
        def boom():
            raise RuntimeError('database password is hunter2')

        response = app.test_client().get('/api/boom')

        assert response.status_code == 500
        assert 'hunter2' not in response.get_data(as_text=True)
        assert response.get_json()['message']

    def test_missing_upload_is_404(self, client):
        assert client.get('/uploads/missing.png').status_code == 404

    def test_seed_command(self, app):
        result = app.test_cli_runner().invoke(args=['seed'])

        assert result.exit_code == 0
        assert 'Seeded' in result.output

    def test_create_admin_command(self, app, client):
        result = app.test_cli_runner().invoke(
            args=['create-admin', '--username', 'owner', '--password', 'long-enough-password'])

        assert result.exit_code == 0
        response = client.post('/api/auth/login', json={'username': 'owner', 'password': 'long-enough-password'})
        assert response.get_json()['user']['isAdmin'] is True

    def test_create_admin_rejects_short_password(self, app):
        result = app.test_cli_runner().invoke(
            args=['create-admin', '--username', 'owner', '--password', 'short'])

        assert result.exit_code != 0
