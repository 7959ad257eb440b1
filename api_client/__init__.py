"""
API Client Package - Python client for the portfolio API

Mirrors the browser data layer: a JSON request helper, a read-through query
cache with explicit invalidation, and the session guard used by admin pages.
"""

from .api import ApiClient, ApiRequestError
from .cache import ADMIN_INVALIDATIONS, STALE_TIMES, QueryCache
from .auth import (
    AUTHENTICATED,
    CHECKING,
    LOGIN_PATH,
    UNAUTHENTICATED,
    AuthState,
    SessionGuard
)

__all__ = [
    'ApiClient',
    'ApiRequestError',
    'QueryCache',
    'STALE_TIMES',
    'ADMIN_INVALIDATIONS',
    'AuthState',
    'SessionGuard',
    'CHECKING',
    'AUTHENTICATED',
    'UNAUTHENTICATED',
    'LOGIN_PATH'
]
