"""
CRUD Module - One validated create/read/update/delete service per entity

``CrudService`` implements the shared contract once; entity specific rules
(slug generation, upserts by natural key, profile syncing) live in small
subclasses. Controllers only translate HTTP to these calls.
"""

from flask import current_app
from sqlalchemy.exc import IntegrityError

from extensions import db
from models import (
    BlogComment,
    BlogPost,
    Contact,
    Experience,
    Language,
    NewsletterSubscriber,
    Project,
    SiteContent,
    Skill,
    SocialProfile,
    Testimonial,
    Translation,
    utcnow_iso,
)
from .data import model_to_dict, slugify, social_profile_to_dict
from .errors import Conflict, NotFound, ValidationError
from .schemas import (
    BlogCommentSchema,
    BlogPostSchema,
    ContactSchema,
    ExperienceSchema,
    LanguageSchema,
    NewsletterSchema,
    ProjectSchema,
    SiteContentSchema,
    SkillSchema,
    SocialProfileSchema,
    TestimonialSchema,
    TranslationSchema,
    is_image_ref,
    validate_payload,
)
from .uploads import delete_upload, store_image_value


class CrudService:
    """Validated persistence for one model"""

    def __init__(self, model, schema, label, filter_field=None, image_fields=(), order_by=None,
                 serializer=model_to_dict, response_key=None, conflict_message=None):
        self.model = model
        self.schema = schema
        self.label = label
        self.response_key = response_key or label.replace(' ', '_')
        self.filter_field = filter_field
        self.image_fields = tuple(image_fields)
        self.order_by = order_by
        self.serializer = serializer
        self.conflict_message = conflict_message or f"A {label} with these details already exists"

    @property
    def not_found_message(self):
        return f"{self.label.capitalize()} not found"

    def serialize(self, row):
        return self.serializer(row)

    def serialize_all(self, rows):
        return [self.serializer(row) for row in rows]

    def validate(self, data, partial=False):
        return validate_payload(self.schema, data, partial=partial,
                                message=f"Invalid {self.label} data")

    def query(self):
        return self.model.query

    def list(self, filter_value=None):
        """Rows in insertion order, optionally filtered on ``filter_field``"""
        query = self.query()
        if filter_value is not None and self.filter_field:
            query = query.filter(getattr(self.model, self.filter_field) == filter_value)
        return query.order_by(*(self.order_by or [self.model.id])).all()

    def get(self, id):
        row = db.session.get(self.model, id)
        if row is None:
            raise NotFound(self.not_found_message)
        return row

    def prepare(self, values, row=None):
        """Hook for entity rules applied after validation; ``row`` is None on create"""
        return values

    def image_fields_for(self, values, row=None):
        return self.image_fields

    def create(self, data):
        values = self.prepare(self.validate(data))
        stored = self._store_images(values, None)
        row = self.model(**values)
        db.session.add(row)
        self._commit(cleanup=stored)
        current_app.logger.info(f"Created {self.label} {row.id}")
        return row

    def update(self, id, data):
        row = self.get(id)
        values = self.prepare(self.validate(data, partial=True), row)
        previous = {field: getattr(row, field) for field in self.image_fields_for(values, row)
                    if field in values}
        stored = self._store_images(values, row)

        for field, value in values.items():
            setattr(row, field, value)
        if hasattr(row, 'updated_at'):
            row.updated_at = utcnow_iso()
        self._commit(cleanup=stored)

        for field, old_value in previous.items():
            if old_value and old_value != getattr(row, field):
                delete_upload(old_value)
        current_app.logger.info(f"Updated {self.label} {row.id}")
        return row

    def delete(self, id):
        row = self.get(id)
        images = [getattr(row, field) for field in self.image_fields_for({}, row)]
        db.session.delete(row)
        self._commit()
        for image in images:
            if image:
                delete_upload(image)
        current_app.logger.info(f"Deleted {self.label} {id}")

    def _store_images(self, values, row):
        stored = []
        for field in self.image_fields_for(values, row):
            value = values.get(field)
            new_value = store_image_value(value, field=field)
            if new_value != value:
                values[field] = new_value
                stored.append(new_value)
        return stored

    def _commit(self, cleanup=()):
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            for path in cleanup:
                delete_upload(path)
            current_app.logger.warning(f"Integrity error on {self.label}: {e.orig}")
            raise Conflict(self.conflict_message) from None
        except Exception:
            db.session.rollback()
            for path in cleanup:
                delete_upload(path)
            raise


class BlogPostService(CrudService):
    """Blog posts: slugs are derived from the title when not supplied"""

    def prepare(self, values, row=None):
        if row is None or ('slug' in values and not values['slug']):
            if not values.get('slug'):
                values['slug'] = slugify(values.get('title') or (row.title if row else ''))
            if not values['slug']:
                raise ValidationError(f"Invalid {self.label} data",
                                      [{'field': 'slug', 'message': 'Could not derive a slug from the title'}])
        return values

    def list_published(self):
        return (self.query()
                .filter_by(is_published=True)
                .order_by(*self.order_by)
                .all())

    def get_by_slug(self, slug, published_only=True):
        query = self.query().filter_by(slug=slug)
        if published_only:
            query = query.filter_by(is_published=True)
        post = query.first()
        if post is None:
            raise NotFound(self.not_found_message)
        return post

    def increment_views(self, post):
        post.view_count = (post.view_count or 0) + 1
        db.session.commit()
        return post


class CommentService(CrudService):

    def list_for_post(self, post_id, approved_only=False):
        query = self.query().filter_by(post_id=post_id)
        if approved_only:
            query = query.filter_by(is_approved=True)
        return query.order_by(BlogComment.id).all()

    def add_to_post(self, post_id, data):
        post = blog_posts.get(post_id)
        values = self.validate(data)
        comment = BlogComment(post_id=post.id, is_approved=False, **values)
        db.session.add(comment)
        self._commit()
        current_app.logger.info(f"New comment {comment.id} on post {post.id} awaiting approval")
        return comment

    def set_approval(self, id, is_approved):
        comment = self.get(id)
        comment.is_approved = is_approved
        self._commit()
        return comment


class SiteContentService(CrudService):
    """Site content rows are unique per (section, key); image values are stored as uploads"""

    def image_fields_for(self, values, row=None):
        content_type = values.get('type') or (row.type if row is not None else None)
        return ('value',) if content_type == 'image' else ()

    def prepare(self, values, row=None):
        content_type = values.get('type') or (row.type if row is not None else 'text')
        value = values.get('value', row.value if row is not None else None)
        if content_type == 'image' and value is not None and not is_image_ref(value):
            raise ValidationError(f"Invalid {self.label} data",
                                  [{'field': 'value', 'message': 'Please enter a valid image URL or upload an image'}])
        return values

    def get_by_key(self, section, key):
        content = self.query().filter_by(section=section, key=key).first()
        if content is None:
            raise NotFound(self.not_found_message)
        return content

    def upsert(self, data):
        """
        Create or replace the value stored under (section, key).

        Returns:
            tuple: (SiteContent, created)
        """
        values = self.validate(data)
        existing = self.query().filter_by(section=values['section'], key=values['key']).first()
        if existing is None:
            return self.create(data), True
        return self.update(existing.id, {'value': values['value'], 'type': values['type']}), False


class SocialProfileService(CrudService):

    def get_by_platform(self, platform):
        profile = self.query().filter(db.func.lower(SocialProfile.platform) == platform.lower()).first()
        if profile is None:
            raise NotFound('Social profile not found for this platform')
        return profile

    def sync(self, id):
        """Refresh the sync timestamp; no platform API is contacted"""
        profile = self.get(id)
        now = utcnow_iso()
        profile.last_synced = now
        profile.updated_at = now
        self._commit()
        current_app.logger.info(f"Synced social profile {profile.platform}")
        return profile


class LanguageService(CrudService):
    """Only one language may be the default"""

    def create(self, data):
        language = super().create(data)
        if language.is_default:
            self._clear_other_defaults(language)
        return language

    def update(self, id, data):
        language = super().update(id, data)
        if language.is_default:
            self._clear_other_defaults(language)
        return language

    def list_active(self):
        return self.query().filter_by(is_active=True).order_by(Language.id).all()

    def _clear_other_defaults(self, language):
        (self.query()
         .filter(Language.id != language.id, Language.is_default.is_(True))
         .update({'is_default': False}, synchronize_session='fetch'))
        self._commit()


class TranslationService(CrudService):

    def prepare(self, values, row=None):
        code = values.get('language_code')
        if code is not None and Language.query.filter_by(code=code).first() is None:
            raise ValidationError(f"Invalid {self.label} data",
                                  [{'field': 'languageCode', 'message': f"Unknown language '{code}'"}])
        return values

    def as_mapping(self, code):
        language = Language.query.filter_by(code=code.lower(), is_active=True).first()
        if language is None:
            raise NotFound('Language not found')
        return {t.key: t.value for t in self.list(language.code)}


class NewsletterService(CrudService):

    def list_subscribers(self, only_active=False):
        query = self.query()
        if only_active:
            query = query.filter_by(is_active=True)
        return query.order_by(NewsletterSubscriber.id).all()


projects = CrudService(Project, ProjectSchema, 'project', filter_field='category',
                       image_fields=('image',))
experiences = CrudService(Experience, ExperienceSchema, 'experience', filter_field='category',
                          image_fields=('logo',))
testimonials = CrudService(Testimonial, TestimonialSchema, 'testimonial', image_fields=('image',))
skills = CrudService(Skill, SkillSchema, 'skill', filter_field='category')
social_profiles = SocialProfileService(
    SocialProfile, SocialProfileSchema, 'social profile', response_key='profile',
    filter_field='platform', image_fields=('avatar_url',), serializer=social_profile_to_dict,
    conflict_message='A profile for this platform already exists')
blog_posts = BlogPostService(BlogPost, BlogPostSchema, 'blog post', response_key='post',
                             filter_field='category', image_fields=('featured_image',),
                             order_by=[BlogPost.updated_at.desc(), BlogPost.id.desc()],
                             conflict_message='A blog post with this slug already exists')
blog_comments = CommentService(BlogComment, BlogCommentSchema, 'comment', filter_field='post_id')
site_content = SiteContentService(SiteContent, SiteContentSchema, 'content', filter_field='section',
                                  conflict_message='Content for this section and key already exists')
contacts = CrudService(Contact, ContactSchema, 'contact')
newsletter = NewsletterService(NewsletterSubscriber, NewsletterSchema, 'subscriber',
                               conflict_message='This email is already subscribed')
languages = LanguageService(Language, LanguageSchema, 'language',
                            conflict_message='A language with this code already exists')
translations = TranslationService(Translation, TranslationSchema, 'translation',
                                  filter_field='language_code',
                                  conflict_message='This key is already translated for the language')

# Entities exposed through the generic admin routes, keyed by URL segment
SERVICES = {
    'projects': projects,
    'experiences': experiences,
    'testimonials': testimonials,
    'skills': skills,
    'social-profiles': social_profiles,
    'blog/posts': blog_posts,
    'languages': languages,
    'translations': translations,
}


__all__ = [
    'CrudService',
    'SERVICES',
    'projects',
    'experiences',
    'testimonials',
    'skills',
    'social_profiles',
    'blog_posts',
    'blog_comments',
    'site_content',
    'contacts',
    'newsletter',
    'languages',
    'translations'
]
