"""
Schemas Module - Input validation for every writable entity

Each schema accepts camelCase (wire format) or snake_case keys and produces
clean column values. List-valued form fields arrive as comma or newline
separated strings and are split here, never in the controllers.
"""

import re
from functools import lru_cache
from typing import Annotated, List, Literal, Optional, Union, get_args, get_origin
from urllib.parse import urlparse

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    StrictBool,
    create_model,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from .errors import ValidationError


PROJECT_CATEGORIES = ('frontend', 'backend', 'fullstack', 'app', 'ml', 'dl', 'ai')
EXPERIENCE_CATEGORIES = ('backend', 'frontend', 'ai-ml', 'devops', 'management')
BLOG_CATEGORIES = ('tech', 'career', 'ai', 'ml', 'web-dev', 'backend', 'frontend',
                   'devops', 'tutorial', 'opinion')
CONTENT_TYPES = ('text', 'html', 'json', 'image')

IMAGE_DATA_URI = re.compile(r'^data:image/[A-Za-z0-9.+-]+;base64,[A-Za-z0-9+/=\s]+$')
UPLOAD_PATH = re.compile(r'^/uploads/[A-Za-z0-9._-]+$')
SLUG_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')
LANGUAGE_CODE = re.compile(r'^[a-z]{2,3}(?:-[A-Za-z]{2})?$')


def is_http_url(value):
    """True for absolute http(s) URLs with a host"""
    parsed = urlparse(value)
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def is_image_ref(value):
    """External URL, transient data URI, or stored upload path"""
    return bool(is_http_url(value) or IMAGE_DATA_URI.match(value) or UPLOAD_PATH.match(value))


def _min_chars(length, message):
    def check(value):
        if len(value.strip()) < length:
            raise PydanticCustomError('too_short', message)
        return value
    return AfterValidator(check)


def min_text(length, message):
    """String with a minimum length and a form-friendly message"""
    return Annotated[str, _min_chars(length, message)]


def _split_commas(value):
    if isinstance(value, str):
        value = value.split(',')
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    return value


def _split_lines(value):
    if isinstance(value, str):
        value = value.splitlines()
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    return value


def _require_items(message):
    def check(value):
        if not value:
            raise PydanticCustomError('empty_list', message)
        return value
    return AfterValidator(check)


def comma_list(message):
    return Annotated[List[str], BeforeValidator(_split_commas), _require_items(message)]


def line_list(message):
    return Annotated[List[str], BeforeValidator(_split_lines), _require_items(message)]


def _check_image_ref(value):
    if not is_image_ref(value):
        raise PydanticCustomError('image_ref', 'Please enter a valid image URL or upload an image')
    return value


def _check_link(value):
    if not is_http_url(value):
        raise PydanticCustomError('url', 'Please enter a valid URL')
    return value


def _check_slug(value):
    if not SLUG_PATTERN.match(value):
        raise PydanticCustomError('slug', 'Slug may only contain lower-case letters, digits and dashes')
    return value


def _check_language_code(value):
    if not LANGUAGE_CODE.match(value):
        raise PydanticCustomError('language_code', 'Language code must look like "en" or "pt-br"')
    return value


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _lower(value):
    return value.strip().lower() if isinstance(value, str) else value


ImageRef = Annotated[str, AfterValidator(_check_image_ref)]
OptionalImageRef = Annotated[Optional[ImageRef], BeforeValidator(_blank_to_none)]
Link = Annotated[str, AfterValidator(_check_link)]
OptionalText = Annotated[Optional[str], BeforeValidator(_blank_to_none)]


class Schema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContactSchema(Schema):
    name: min_text(2, 'Name must be at least 2 characters')
    email: EmailStr
    subject: min_text(5, 'Subject must be at least 5 characters')
    message: min_text(10, 'Message must be at least 10 characters')


class NewsletterSchema(Schema):
    email: Annotated[EmailStr, BeforeValidator(_lower)]
    name: OptionalText = None
    is_active: bool = True


class SiteContentSchema(Schema):
    section: min_text(2, 'Section must be at least 2 characters')
    key: min_text(2, 'Key must be at least 2 characters')
    value: min_text(1, 'Value is required')
    type: Literal[CONTENT_TYPES] = 'text'


class ProjectSchema(Schema):
    title: min_text(3, 'Title must be at least 3 characters')
    description: min_text(10, 'Description must be at least 10 characters')
    image: ImageRef
    category: Literal[PROJECT_CATEGORIES]
    technologies: comma_list('Please enter at least one technology')
    tags: comma_list('Please enter at least one tag')
    link: Link


class ExperienceSchema(Schema):
    title: min_text(3, 'Title must be at least 3 characters')
    company: min_text(2, 'Company name must be at least 2 characters')
    location: min_text(2, 'Location must be at least 2 characters')
    period: min_text(3, 'Period must be at least 3 characters')
    category: Literal[EXPERIENCE_CATEGORIES]
    description: line_list('Description must have at least one line')
    technologies: comma_list('Please enter at least one technology')
    achievements: line_list('Please enter at least one achievement')
    logo: OptionalImageRef = None


class TestimonialSchema(Schema):
    name: min_text(2, 'Name must be at least 2 characters')
    position: min_text(2, 'Position must be at least 2 characters')
    company: min_text(2, 'Company must be at least 2 characters')
    text: min_text(10, 'Testimonial text must be at least 10 characters')
    image: ImageRef


class SkillSchema(Schema):
    name: min_text(1, 'Name is required')
    category: min_text(2, 'Category must be at least 2 characters')
    proficiency: int = Field(ge=0, le=100)
    icon: OptionalText = None
    years_experience: OptionalText = None


class BlogPostSchema(Schema):
    title: min_text(3, 'Title must be at least 3 characters')
    slug: Annotated[Optional[Annotated[str, AfterValidator(_check_slug)]],
                    BeforeValidator(_blank_to_none)] = None
    summary: min_text(10, 'Summary must be at least 10 characters')
    content: min_text(10, 'Content must be at least 10 characters')
    featured_image: ImageRef
    author_id: Optional[int] = None
    category: Literal[BLOG_CATEGORIES]
    tags: Annotated[Optional[List[str]], BeforeValidator(_split_commas)] = None
    is_published: bool = True


class BlogCommentSchema(Schema):
    name: min_text(2, 'Name must be at least 2 characters')
    email: EmailStr
    content: min_text(2, 'Comment must be at least 2 characters')


class CommentApprovalSchema(Schema):
    is_approved: StrictBool


class SubscriberStatusSchema(Schema):
    is_active: StrictBool


class SocialProfileSchema(Schema):
    platform: Annotated[min_text(2, 'Platform must be at least 2 characters'), BeforeValidator(_lower)]
    username: min_text(1, 'Username is required')
    profile_url: Link
    display_name: OptionalText = None
    bio: OptionalText = None
    avatar_url: OptionalImageRef = None
    follower_count: Optional[Annotated[int, Field(ge=0)]] = None
    is_connected: bool = True
    access_token: OptionalText = None
    refresh_token: OptionalText = None
    token_expiry: OptionalText = None


class LanguageSchema(Schema):
    code: Annotated[str, BeforeValidator(_lower), AfterValidator(_check_language_code)]
    name: min_text(2, 'Name must be at least 2 characters')
    is_active: bool = True
    is_default: bool = False


class TranslationSchema(Schema):
    language_code: Annotated[min_text(2, 'Language code is required'), BeforeValidator(_lower)]
    key: min_text(1, 'Key is required')
    value: min_text(1, 'Value is required')


class ChangePasswordSchema(Schema):
    current_password: min_text(1, 'Current password is required')
    new_password: min_text(8, 'New password must be at least 8 characters')


class UploadSchema(Schema):
    base64_data: min_text(1, 'No file data provided')
    filename: OptionalText = None


@lru_cache(maxsize=None)
def partial_schema(schema):
    """Same rules as ``schema`` with every field optional (for updates)"""
    fields = {}
    for name, info in schema.model_fields.items():
        annotation = info.annotation
        if info.metadata:
            annotation = Annotated[(annotation, *info.metadata)]
        fields[name] = (Optional[annotation], None)
    return create_model(f'Partial{schema.__name__}', __base__=schema, **fields)


def _allows_none(annotation):
    """True when ``annotation`` accepts an explicit null"""
    if annotation is None or annotation is type(None):
        return True
    origin = get_origin(annotation)
    if origin is Annotated:
        return _allows_none(get_args(annotation)[0])
    if origin is Union:
        return any(_allows_none(arg) for arg in get_args(annotation))
    return False


def format_errors(exc):
    """Flatten a pydantic error into ``[{field, message}]``"""
    errors = []
    for error in exc.errors():
        loc = error.get('loc') or ()
        field = '.'.join(str(part) for part in loc) or 'body'
        errors.append({'field': field, 'message': error.get('msg', 'Invalid value')})
    return errors


def validate_payload(schema, data, partial=False, message='Invalid data'):
    """
    Validate ``data`` against ``schema`` and return clean column values.

    With ``partial`` only the supplied fields are validated and returned;
    an explicit null is rejected unless the full schema allows null for
    that field.

    Raises:
        ValidationError: listing every offending field
    """
    if not isinstance(data, dict):
        raise ValidationError(message, [{'field': 'body', 'message': 'Expected a JSON object'}])

    model = partial_schema(schema) if partial else schema
    try:
        parsed = model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(message, format_errors(exc)) from None

    values = parsed.model_dump(exclude_unset=partial)
    if partial:
        errors = [
            {'field': info.alias or name, 'message': 'This field cannot be empty'}
            for name, info in schema.model_fields.items()
            if name in values and values[name] is None and not _allows_none(info.annotation)
        ]
        if errors:
            raise ValidationError(message, errors)
    return values


__all__ = [
    'PROJECT_CATEGORIES',
    'EXPERIENCE_CATEGORIES',
    'BLOG_CATEGORIES',
    'CONTENT_TYPES',
    'is_http_url',
    'is_image_ref',
    'ContactSchema',
    'NewsletterSchema',
    'SiteContentSchema',
    'ProjectSchema',
    'ExperienceSchema',
    'TestimonialSchema',
    'SkillSchema',
    'BlogPostSchema',
    'BlogCommentSchema',
    'CommentApprovalSchema',
    'SubscriberStatusSchema',
    'SocialProfileSchema',
    'LanguageSchema',
    'TranslationSchema',
    'ChangePasswordSchema',
    'UploadSchema',
    'partial_schema',
    'format_errors',
    'validate_payload'
]
