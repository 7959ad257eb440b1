"""
Data Management Module - Serialization and default content

Rows leave the API as camelCase dictionaries, matching the field names the
front-end uses (``featuredImage``, ``isPublished``, ``profileUrl``...).
"""

import re

from flask import current_app

from extensions import db
from models import Experience, SiteContent, SocialProfile, User


def to_camel(name):
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def model_to_dict(row, exclude=()):
    """Convert any model row to a camelCase dictionary"""
    if row is None:
        return None
    return {
        to_camel(column.name): getattr(row, column.name)
        for column in row.__table__.columns
        if column.name not in exclude
    }


def user_to_dict(user):
    """Public view of a user; the password hash never leaves the server"""
    return {
        'id': user.id,
        'username': user.username,
        'isAdmin': bool(user.is_admin)
    }


def social_profile_to_dict(profile):
    """Social profile without its OAuth tokens"""
    data = model_to_dict(profile, exclude=('access_token', 'refresh_token'))
    data['hasAccessToken'] = bool(profile.access_token)
    return data


def slugify(title):
    """Lower-case, dash separated slug derived from a title"""
    slug = (title or '').lower()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'\s+', '-', slug.strip())
    slug = re.sub(r'-+', '-', slug)
    return slug.strip('-')


DEFAULT_SITE_CONTENT = [
    ('hero', 'name', 'Your Name', 'text'),
    ('hero', 'role', 'Full Stack Developer & AI Specialist', 'text'),
    ('about', 'title', 'Full Stack Developer & AI Engineer', 'text'),
    ('about', 'bio', (
        'I am a passionate Full Stack Developer with expertise in backend systems '
        'and AI development, building scalable applications and machine learning '
        'models.'
    ), 'text'),
    ('about', 'degree', 'MS in Computer Science', 'text'),
    ('contact', 'email', 'hello@yourdomain.dev', 'text'),
    ('footer', 'copyright', 'All rights reserved.', 'text'),
]

DEFAULT_EXPERIENCES = [
    {
        'title': 'Backend Developer',
        'company': 'TechStack Solutions',
        'location': 'Chicago, IL',
        'period': 'Mar 2023 - Present',
        'description': [
            'Designed and implemented RESTful APIs for high-traffic applications.',
            'Developed data processing pipelines for real-time analytics.'
        ],
        'technologies': ['Python', 'Flask', 'PostgreSQL', 'Redis', 'Docker'],
        'achievements': [
            'Reduced API response time by 65% through optimization and caching.',
            'Implemented a CI/CD pipeline reducing deployment time to minutes.'
        ],
        'category': 'backend',
    },
    {
        'title': 'Machine Learning Intern',
        'company': 'AI Solutions Inc.',
        'location': 'Remote',
        'period': 'May 2021 - Aug 2021',
        'description': [
            'Developed and deployed machine learning models for predictive analytics.',
            'Created data pipelines for processing large datasets.'
        ],
        'technologies': ['Python', 'Scikit-learn', 'Pandas', 'AWS'],
        'achievements': [
            'Built a recommendation system that increased user engagement by 22%.'
        ],
        'category': 'ai-ml',
    },
]

DEFAULT_SOCIAL_PROFILES = [
    {'platform': 'linkedin', 'username': 'your-name', 'profile_url': 'https://www.linkedin.com/in/your-name/'},
    {'platform': 'github', 'username': 'your-name', 'profile_url': 'https://github.com/your-name'},
]


def seed_default_content():
    """Insert default site content, experiences and social profiles into empty tables"""
    created = 0
    if SiteContent.query.count() == 0:
        for section, key, value, content_type in DEFAULT_SITE_CONTENT:
            db.session.add(SiteContent(section=section, key=key, value=value, type=content_type))
            created += 1
    if Experience.query.count() == 0:
        for entry in DEFAULT_EXPERIENCES:
            db.session.add(Experience(**entry))
            created += 1
    if SocialProfile.query.count() == 0:
        for entry in DEFAULT_SOCIAL_PROFILES:
            db.session.add(SocialProfile(**entry))
            created += 1
    db.session.commit()
    if created:
        current_app.logger.info(f"Seeded {created} default content rows")
    return created


def ensure_admin_user(username=None, password=None):
    """
    Create the admin account, or reset its password, from configuration.

    Returns:
        User | None: The admin user, or None when no credentials are configured
    """
    from .security import hash_password

    username = username or current_app.config.get('ADMIN_USERNAME')
    password = password or current_app.config.get('ADMIN_PASSWORD')
    if not username or not password:
        current_app.logger.debug("Admin credentials not configured; skipping admin bootstrap")
        return None

    user = User.query.filter_by(username=username).first()
    if user is None:
        user = User(username=username, is_admin=True)
        db.session.add(user)
        current_app.logger.info(f"Created admin user {username}")
    user.password_hash = hash_password(password)
    user.is_admin = True
    db.session.commit()
    return user


__all__ = [
    'to_camel',
    'model_to_dict',
    'user_to_dict',
    'social_profile_to_dict',
    'slugify',
    'seed_default_content',
    'ensure_admin_user'
]
