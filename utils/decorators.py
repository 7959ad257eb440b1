"""
Decorators Module - Authentication and authorization decorators
"""

from functools import wraps

from flask_login import current_user

from .errors import Forbidden, Unauthorized


def login_required(f):
    """Decorator to require an authenticated session"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            raise Unauthorized()
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """Decorator to require admin role (401 without a session, 403 for non-admins)"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            raise Unauthorized()
        if not current_user.is_admin:
            raise Forbidden()
        return f(*args, **kwargs)
    return decorated_function
