"""
Errors Module - API error taxonomy

Every error carries the HTTP status it maps to. Controllers raise these and
the handlers registered in the application factory turn them into JSON
responses of the form ``{"message": ..., "errors": [...]}``.
"""


class ApiError(Exception):
    """Base class for errors surfaced to API clients"""

    status_code = 500
    default_message = 'An unexpected error occurred.'

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'message': self.message}


class ValidationError(ApiError):
    """Client input failed schema validation"""

    status_code = 400
    default_message = 'Invalid data'

    def __init__(self, message=None, errors=None):
        super().__init__(message)
        # [{'field': 'email', 'message': '...'}]
        self.errors = errors or []

    @property
    def fields(self):
        return [error['field'] for error in self.errors]

    def to_dict(self):
        payload = super().to_dict()
        payload['errors'] = self.errors
        return payload


class Unauthorized(ApiError):
    status_code = 401
    default_message = 'Authentication required'


class Forbidden(ApiError):
    status_code = 403
    default_message = 'Admin access required'


class NotFound(ApiError):
    status_code = 404
    default_message = 'Not found'


class Conflict(ApiError):
    status_code = 409
    default_message = 'Resource already exists'


class TooManyRequests(ApiError):
    status_code = 429
    default_message = 'Too many requests. Please try again later.'


class InternalError(ApiError):
    status_code = 500
    default_message = 'Something went wrong. Please try again later.'


__all__ = [
    'ApiError',
    'ValidationError',
    'Unauthorized',
    'Forbidden',
    'NotFound',
    'Conflict',
    'TooManyRequests',
    'InternalError'
]
