from datetime import datetime, timezone

from flask_login import UserMixin
from sqlalchemy import JSON

from extensions import db


def utcnow_iso():
    """Current UTC time as an ISO-8601 string, the stored timestamp format"""
    return datetime.now(timezone.utc).isoformat()


# Custom JSON type that uses JSONB on PostgreSQL and JSON/Text on SQLite
class SafeJSON(db.TypeDecorator):
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            from sqlalchemy.dialects.postgresql import JSONB
            return dialect.type_descriptor(JSONB())
        else:
            return dialect.type_descriptor(JSON())


class User(UserMixin, db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)

    posts = db.relationship('BlogPost', backref='author', lazy=True)


class Contact(db.Model):
    __tablename__ = 'contacts'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    subject = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.String(40), default=utcnow_iso, nullable=False)


class SiteContent(db.Model):
    __tablename__ = 'site_content'
    id = db.Column(db.Integer, primary_key=True)
    section = db.Column(db.String(100), nullable=False)  # hero, about, contact, footer...
    key = db.Column(db.String(100), nullable=False)  # title, bio, photo...
    value = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(20), default='text', nullable=False)  # text, html, json, image
    updated_at = db.Column(db.String(40), default=utcnow_iso, onupdate=utcnow_iso, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('section', 'key', name='uq_site_content_section_key'),
    )


class Project(db.Model):
    __tablename__ = 'projects_content'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    image = db.Column(db.String(500), nullable=False)
    category = db.Column(db.String(50), nullable=False)
    technologies = db.Column(SafeJSON, default=list, nullable=False)
    tags = db.Column(SafeJSON, default=list, nullable=False)
    link = db.Column(db.String(500), nullable=False)
    updated_at = db.Column(db.String(40), default=utcnow_iso, onupdate=utcnow_iso, nullable=False)


class Experience(db.Model):
    __tablename__ = 'experience_content'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    company = db.Column(db.String(255), nullable=False)
    location = db.Column(db.String(255), nullable=False)
    period = db.Column(db.String(100), nullable=False)
    description = db.Column(SafeJSON, default=list, nullable=False)  # bullet points
    technologies = db.Column(SafeJSON, default=list, nullable=False)
    achievements = db.Column(SafeJSON, default=list, nullable=False)
    category = db.Column(db.String(50), nullable=False)
    logo = db.Column(db.String(500))
    updated_at = db.Column(db.String(40), default=utcnow_iso, onupdate=utcnow_iso, nullable=False)


class Testimonial(db.Model):
    __tablename__ = 'testimonials_content'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    position = db.Column(db.String(255), nullable=False)
    company = db.Column(db.String(255), nullable=False)
    text = db.Column(db.Text, nullable=False)
    image = db.Column(db.String(500), nullable=False)
    updated_at = db.Column(db.String(40), default=utcnow_iso, onupdate=utcnow_iso, nullable=False)


class BlogPost(db.Model):
    __tablename__ = 'blog_posts'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False)
    summary = db.Column(db.Text, nullable=False)
    content = db.Column(db.Text, nullable=False)
    featured_image = db.Column(db.String(500), nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    category = db.Column(db.String(50), nullable=False)
    tags = db.Column(SafeJSON)
    is_published = db.Column(db.Boolean, default=True, nullable=False)
    view_count = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.String(40), default=utcnow_iso, nullable=False)
    updated_at = db.Column(db.String(40), default=utcnow_iso, onupdate=utcnow_iso, nullable=False)

    # Comments go with their post
    comments = db.relationship('BlogComment', backref='post', lazy=True, cascade='all, delete-orphan')


class BlogComment(db.Model):
    __tablename__ = 'blog_comments'
    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('blog_posts.id'), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    is_approved = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.String(40), default=utcnow_iso, nullable=False)


class Skill(db.Model):
    __tablename__ = 'skills_content'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(100), nullable=False)
    proficiency = db.Column(db.Integer, nullable=False)  # 0-100
    icon = db.Column(db.String(100))
    years_experience = db.Column(db.String(50))  # "3+ years"
    updated_at = db.Column(db.String(40), default=utcnow_iso, onupdate=utcnow_iso, nullable=False)


class NewsletterSubscriber(db.Model):
    __tablename__ = 'newsletter_subscribers'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(255))
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.String(40), default=utcnow_iso, nullable=False)


class Language(db.Model):
    __tablename__ = 'languages'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(10), unique=True, nullable=False)  # en, es, fr
    name = db.Column(db.String(100), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    is_default = db.Column(db.Boolean, default=False, nullable=False)

    translations = db.relationship('Translation', backref='language', lazy=True, cascade='all, delete-orphan')


class Translation(db.Model):
    __tablename__ = 'translations'
    id = db.Column(db.Integer, primary_key=True)
    language_code = db.Column(db.String(10), db.ForeignKey('languages.code'), nullable=False)
    key = db.Column(db.String(255), nullable=False)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.String(40), default=utcnow_iso, onupdate=utcnow_iso, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('language_code', 'key', name='uq_translation_language_key'),
    )


class SocialProfile(db.Model):
    __tablename__ = 'social_profiles'
    id = db.Column(db.Integer, primary_key=True)
    platform = db.Column(db.String(50), unique=True, nullable=False)  # linkedin, github, twitter
    username = db.Column(db.String(255), nullable=False)
    profile_url = db.Column(db.String(500), nullable=False)
    display_name = db.Column(db.String(255))
    bio = db.Column(db.Text)
    avatar_url = db.Column(db.String(500))
    follower_count = db.Column(db.Integer)
    is_connected = db.Column(db.Boolean, default=True, nullable=False)
    last_synced = db.Column(db.String(40), default=utcnow_iso, nullable=False)
    access_token = db.Column(db.Text)
    refresh_token = db.Column(db.Text)
    token_expiry = db.Column(db.String(40))
    updated_at = db.Column(db.String(40), default=utcnow_iso, onupdate=utcnow_iso, nullable=False)
