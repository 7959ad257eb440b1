"""
Utils Package - Centralized utility modules initialization
"""

from .decorators import login_required, admin_required
from .errors import (
    ApiError,
    ValidationError,
    Unauthorized,
    Forbidden,
    NotFound,
    Conflict,
    TooManyRequests,
    InternalError
)
from .data import (
    model_to_dict,
    user_to_dict,
    social_profile_to_dict,
    slugify,
    seed_default_content,
    ensure_admin_user
)
from .notifications import send_admin_notification
from .security import (
    get_client_ip,
    check_rate_limit,
    enforce_rate_limit,
    log_audit_event,
    hash_password,
    verify_password,
    authenticate
)
from .uploads import save_data_uri, delete_upload
from .schemas import validate_payload

__all__ = [
    # Decorators
    'login_required',
    'admin_required',

    # Errors
    'ApiError',
    'ValidationError',
    'Unauthorized',
    'Forbidden',
    'NotFound',
    'Conflict',
    'TooManyRequests',
    'InternalError',

    # Data
    'model_to_dict',
    'user_to_dict',
    'social_profile_to_dict',
    'slugify',
    'seed_default_content',
    'ensure_admin_user',

    # Notifications
    'send_admin_notification',

    # Security
    'get_client_ip',
    'check_rate_limit',
    'enforce_rate_limit',
    'log_audit_event',
    'hash_password',
    'verify_password',
    'authenticate',

    # Uploads
    'save_data_uri',
    'delete_upload',

    # Validation
    'validate_payload'
]
