"""
Auth Module - Session guard for admin pages

The server session cookie is the source of truth; ``AuthState`` only mirrors
the last answer of ``/api/auth/me`` and is never persisted.

    checking -> authenticated
             -> unauthenticated

Entering a protected route moves the state back to ``checking``. A redirect
to the login page is decided only once a check has resolved negatively.
"""

import logging

import requests

from .api import ApiRequestError


logger = logging.getLogger(__name__)

CHECKING = 'checking'
AUTHENTICATED = 'authenticated'
UNAUTHENTICATED = 'unauthenticated'

ME_URL = '/api/auth/me'
LOGIN_URL = '/api/auth/login'
LOGOUT_URL = '/api/auth/logout'

ADMIN_PREFIX = '/admin'
LOGIN_PATH = '/admin/login'

LOADING = 'loading'
RENDER = 'render'
REDIRECT_TO_LOGIN = f'redirect:{LOGIN_PATH}'


class AuthState:
    """Current guard status and the signed-in user, if any"""

    def __init__(self):
        self.status = CHECKING
        self.user = None

    @property
    def is_loading(self):
        return self.status == CHECKING

    @property
    def is_authenticated(self):
        return self.status == AUTHENTICATED

    def start_check(self):
        self.status = CHECKING

    def authenticate(self, user):
        self.status = AUTHENTICATED
        self.user = user

    def reset(self):
        self.status = UNAUTHENTICATED
        self.user = None

    def __repr__(self):
        return f"<AuthState {self.status} user={self.user!r}>"


def is_protected(path):
    """Admin routes other than the login page"""
    path = path.split('?', 1)[0]
    if path.startswith(LOGIN_PATH):
        return False
    return path == ADMIN_PREFIX or path.startswith(ADMIN_PREFIX + '/')


class SessionGuard:
    """Decides whether an admin route renders, waits or redirects"""

    def __init__(self, cache, state=None):
        self.cache = cache
        self.state = state if state is not None else AuthState()

    @property
    def client(self):
        return self.cache.client

    def check(self):
        """Ask the server for the current session, bypassing the cache"""
        self.state.start_check()
        try:
            data = self.cache.fetch(ME_URL, force=True, on_401='return_none')
        except (ApiRequestError, requests.RequestException) as e:
            logger.warning(f"Error checking authentication: {e}")
            data = None

        if data and data.get('authenticated') and data.get('user'):
            self.state.authenticate(data['user'])
        else:
            self.state.reset()
        return self.state.status

    def login(self, username, password):
        """
        Sign in and prime the session cache entry.

        Raises:
            ApiRequestError: on rejected credentials
        """
        data = self.client.request(LOGIN_URL, method='POST',
                                   data={'username': username, 'password': password})
        user = data.get('user') if data else None
        if not user:
            logger.warning("Login returned no user")
            self.state.reset()
            return None

        self.state.authenticate(user)
        self.cache.set(ME_URL, {'authenticated': True, 'user': user})
        return user

    def logout(self):
        self.client.request(LOGOUT_URL, method='POST')
        self.state.reset()
        self.cache.set(ME_URL, {'authenticated': False})
        self.cache.invalidate(ME_URL)

    def enter(self, path):
        """Navigation hook: protected routes always start a fresh check"""
        if is_protected(path):
            self.state.start_check()
            return True
        return False

    def decide(self, path):
        """``'render'``, ``'loading'`` or ``'redirect:/admin/login'`` for ``path``"""
        if not is_protected(path):
            return RENDER
        if self.state.status == CHECKING:
            return LOADING
        if self.state.status == UNAUTHENTICATED:
            return REDIRECT_TO_LOGIN
        return RENDER

    def navigate(self, path):
        """Enter ``path``, run the check it requires and return the decision"""
        if self.enter(path):
            self.check()
        return self.decide(path)

    def fetch_protected(self, url, stale_time=None):
        """
        Fetch admin data; a 401 means "not signed in yet", not an error.

        While a check is in flight the state is left alone so the guard
        does not redirect before the session answer arrives.
        """
        try:
            return self.cache.fetch(url, stale_time=stale_time)
        except ApiRequestError as e:
            if e.status != 401:
                raise
            if self.state.status != CHECKING:
                self.state.reset()
            return None
