"""
Tests for the input validation schemas.
"""

import pytest

from utils.errors import ValidationError
from utils.schemas import (
    BlogPostSchema,
    ContactSchema,
    ExperienceSchema,
    LanguageSchema,
    NewsletterSchema,
    ProjectSchema,
    SiteContentSchema,
    SkillSchema,
    SocialProfileSchema,
    is_image_ref,
    partial_schema,
    validate_payload,
)

from tests.conftest import PNG_DATA_URI, project_payload


class TestValidatePayload:
    """Tests for validate_payload()."""

    def test_returns_column_values(self):
        values = validate_payload(ProjectSchema, project_payload())

        assert values == {
            'title': 'My App',
            'description': 'A great application',
            'image': 'https://a.test/x.png',
            'category': 'backend',
            'technologies': ['Go', 'SQL'],
            'tags': ['web'],
            'link': 'https://a.test',
        }

    def test_snake_case_keys_are_accepted(self):
        values = validate_payload(SocialProfileSchema, {
            'platform': 'github', 'username': 'jane', 'profile_url': 'https://github.com/jane'})

        assert values['profile_url'] == 'https://github.com/jane'

    def test_errors_use_wire_names(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(SocialProfileSchema, {'platform': 'github', 'username': 'jane',
                                                   'profileUrl': 'github.com/jane'})

        assert exc_info.value.fields == ['profileUrl']
        assert exc_info.value.status_code == 400

    def test_every_offending_field_is_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(ContactSchema, {'name': 'J', 'email': 'nope', 'subject': 'Hi', 'message': 'short'})

        assert set(exc_info.value.fields) == {'name', 'email', 'subject', 'message'}

    def test_messages_are_form_friendly(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(ContactSchema, {'name': 'Jane', 'email': 'jane@gmail.com',
                                             'subject': 'Hello there', 'message': 'short'})

        assert exc_info.value.errors == [
            {'field': 'message', 'message': 'Message must be at least 10 characters'}
        ]

    @pytest.mark.parametrize('body', [None, [], 'text', 42])
    def test_body_must_be_an_object(self, body):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(ContactSchema, body)

        assert exc_info.value.fields == ['body']

    def test_partial_only_returns_supplied_fields(self):
        values = validate_payload(ProjectSchema, {'technologies': 'Rust'}, partial=True)

        assert values == {'technologies': ['Rust']}

    def test_partial_still_validates_supplied_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(ProjectSchema, {'category': 'games'}, partial=True)

        assert exc_info.value.fields == ['category']

    def test_partial_rejects_null_for_required_field(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(ProjectSchema, {'featuredImage': None, 'title': None}, partial=True)

        assert exc_info.value.fields == ['title']

    @pytest.mark.parametrize('schema, data, field', [
        (SiteContentSchema, {'type': None}, 'type'),
        (BlogPostSchema, {'isPublished': None}, 'isPublished'),
        (LanguageSchema, {'isDefault': None}, 'isDefault'),
        (SocialProfileSchema, {'isConnected': None}, 'isConnected'),
    ])
    def test_partial_rejects_null_for_defaulted_field(self, schema, data, field):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(schema, data, partial=True)

        assert exc_info.value.fields == [field]

    def test_partial_allows_null_for_optional_field(self):
        values = validate_payload(ExperienceSchema, {'logo': None}, partial=True)

        assert values == {'logo': None}


class TestListFields:
    """Comma and newline separated list fields."""

    def test_comma_list_trims_and_drops_blanks(self):
        values = validate_payload(ProjectSchema, project_payload(technologies=' Go ,, SQL , '))

        assert values['technologies'] == ['Go', 'SQL']

    def test_comma_list_accepts_arrays(self):
        values = validate_payload(ProjectSchema, project_payload(tags=['api', ' web ']))

        assert values['tags'] == ['api', 'web']

    def test_empty_list_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(ProjectSchema, project_payload(tags=' , '))

        assert exc_info.value.errors == [{'field': 'tags', 'message': 'Please enter at least one tag'}]

    def test_line_list(self):
        values = validate_payload(ExperienceSchema, {
            'title': 'Engineer', 'company': 'Acme', 'location': 'Remote', 'period': '2021',
            'category': 'devops', 'description': 'one\r\ntwo\n\nthree',
            'technologies': 'Terraform', 'achievements': 'Automated everything'})

        assert values['description'] == ['one', 'two', 'three']
        assert values['logo'] is None

    def test_blog_tags_are_optional(self):
        values = validate_payload(BlogPostSchema, {
            'title': 'A post', 'summary': 'Summary text here', 'content': 'Content text here',
            'featuredImage': '/uploads/cover.png', 'category': 'ai'})

        assert values['tags'] is None
        assert values['slug'] is None
        assert values['is_published'] is True


class TestFieldRules:
    """Individual field rules."""

    @pytest.mark.parametrize('value', [
        'https://a.test/x.png',
        'http://example.com/image',
        '/uploads/0a1b2c_photo.png',
        PNG_DATA_URI,
    ])
    def test_valid_image_refs(self, value):
        assert is_image_ref(value)

    @pytest.mark.parametrize('value', [
        'ftp://example.com/x.png',
        'x.png',
        '/uploads/../secret',
        'data:text/plain;base64,aGVsbG8=',
        'https://',
    ])
    def test_invalid_image_refs(self, value):
        assert not is_image_ref(value)

    @pytest.mark.parametrize('proficiency', [-1, 101, 'lots'])
    def test_skill_proficiency(self, proficiency):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(SkillSchema, {'name': 'Go', 'category': 'backend', 'proficiency': proficiency})

        assert exc_info.value.fields == ['proficiency']

    def test_blog_slug_format(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(BlogPostSchema, {
                'title': 'A post', 'slug': 'Not A Slug', 'summary': 'Summary text here',
                'content': 'Content text here', 'featuredImage': '/uploads/cover.png', 'category': 'ai'})

        assert exc_info.value.fields == ['slug']

    def test_social_platform_is_lowercased(self):
        values = validate_payload(SocialProfileSchema, {
            'platform': ' LinkedIn ', 'username': 'jane', 'profileUrl': 'https://www.linkedin.com/in/jane/'})

        assert values['platform'] == 'linkedin'

    def test_newsletter_email_is_lowercased(self):
        values = validate_payload(NewsletterSchema, {'email': ' Fan@Gmail.COM '})

        assert values['email'] == 'fan@gmail.com'

    def test_follower_count_cannot_be_negative(self):
        with pytest.raises(ValidationError):
            validate_payload(SocialProfileSchema, {
                'platform': 'github', 'username': 'jane', 'profileUrl': 'https://github.com/jane',
                'followerCount': -5})


class TestPartialSchema:
    """Tests for partial_schema()."""

    def test_is_cached(self):
        assert partial_schema(ProjectSchema) is partial_schema(ProjectSchema)

    def test_all_fields_optional(self):
        model = partial_schema(ProjectSchema)

        assert model.model_validate({}).model_dump(exclude_unset=True) == {}
