"""
Public Routes - Read-only portfolio API and visitor submissions
"""

from flask import current_app, jsonify, request
from markupsafe import escape

from utils.crud import (
    blog_comments,
    blog_posts,
    contacts,
    experiences,
    languages,
    newsletter,
    projects,
    site_content,
    skills,
    social_profiles,
    testimonials,
    translations,
)
from utils.errors import NotFound
from utils.notifications import send_admin_notification
from utils.security import enforce_rate_limit
from . import public_bp


# (url segment, service, query parameter filtering the list)
COLLECTIONS = (
    ('projects', projects, 'category'),
    ('experiences', experiences, 'category'),
    ('testimonials', testimonials, None),
    ('skills', skills, 'category'),
    ('social-profiles', social_profiles, 'platform'),
)


def _list_view(service, filter_param):
    def view():
        value = request.args.get(filter_param) if filter_param else None
        if value and filter_param == 'platform':
            value = value.lower()
        return jsonify(service.serialize_all(service.list(value or None)))
    return view


def _detail_view(service):
    def view(id):
        return jsonify(service.serialize(service.get(id)))
    return view


for segment, service, filter_param in COLLECTIONS:
    endpoint = segment.replace('-', '_')
    public_bp.add_url_rule(f'/{segment}', f'list_{endpoint}',
                           _list_view(service, filter_param))
    public_bp.add_url_rule(f'/{segment}/<int:id>', f'get_{endpoint}',
                           _detail_view(service))


@public_bp.route('/social-profiles/platform/<platform>')
def get_social_profile_by_platform(platform):
    profile = social_profiles.get_by_platform(platform)
    return jsonify(social_profiles.serialize(profile))


# Site content

@public_bp.route('/content')
def list_content():
    section = request.args.get('section') or None
    return jsonify(site_content.serialize_all(site_content.list(section)))


@public_bp.route('/content/<section>')
def get_content_section(section):
    return jsonify(site_content.serialize_all(site_content.list(section)))


@public_bp.route('/content/<section>/<key>')
def get_content_item(section, key):
    return jsonify(site_content.serialize(site_content.get_by_key(section, key)))


# Blog

@public_bp.route('/blog/posts')
def list_blog_posts():
    """Published posts, newest first"""
    return jsonify(blog_posts.serialize_all(blog_posts.list_published()))


@public_bp.route('/blog/posts/<int:id>')
def get_blog_post(id):
    post = blog_posts.get(id)
    if not post.is_published:
        # Drafts are only visible through the admin API
        raise NotFound(blog_posts.not_found_message)
    return jsonify(blog_posts.serialize(post))


@public_bp.route('/blog/posts/slug/<slug>')
def get_blog_post_by_slug(slug):
    """Fetch a published post and count the view"""
    post = blog_posts.increment_views(blog_posts.get_by_slug(slug))
    return jsonify(blog_posts.serialize(post))


@public_bp.route('/blog/posts/<int:id>/comments')
def list_blog_post_comments(id):
    post = blog_posts.get(id)
    return jsonify(blog_comments.serialize_all(
        blog_comments.list_for_post(post.id, approved_only=True)))


@public_bp.route('/blog/posts/<int:id>/comments', methods=['POST'])
def add_blog_post_comment(id):
    """Submit a comment; it stays hidden until approved"""
    enforce_rate_limit('comment')
    comment = blog_comments.add_to_post(id, request.get_json(silent=True))
    return jsonify({
        'message': 'Comment submitted and awaiting approval',
        'comment': blog_comments.serialize(comment)
    }), 201


# Internationalisation

@public_bp.route('/languages')
def list_languages():
    return jsonify(languages.serialize_all(languages.list_active()))


@public_bp.route('/translations/<code>')
def get_translations(code):
    """Translations of one language as a {key: value} map"""
    return jsonify(translations.as_mapping(code))


# Visitor submissions

@public_bp.route('/contact', methods=['POST'])
def submit_contact():
    """Store a contact message and notify the site owner"""
    enforce_rate_limit('contact')
    contact = contacts.create(request.get_json(silent=True))

    send_admin_notification(
        'New Contact Message',
        f"<b>From:</b> {escape(contact.name)} ({escape(contact.email)})\n"
        f"<b>Subject:</b> {escape(contact.subject)}\n\n{escape(contact.message)}"
    )
    return jsonify({'message': 'Message sent successfully', 'id': contact.id}), 201


@public_bp.route('/newsletter/subscribe', methods=['POST'])
def subscribe_newsletter():
    enforce_rate_limit('newsletter')
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        # Visitors cannot subscribe someone as inactive
        data = {key: value for key, value in data.items() if key not in ('isActive', 'is_active')}
    subscriber = newsletter.create(data)
    current_app.logger.info(f"New newsletter subscriber {subscriber.id}")
    return jsonify({
        'message': 'Successfully subscribed to the newsletter',
        'subscriber': newsletter.serialize(subscriber)
    }), 201
