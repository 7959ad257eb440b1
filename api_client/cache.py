"""
Cache Module - Read-through query cache keyed by request URL

Entries stay fresh forever unless the key has a stale time; mutations must
name the keys they invalidate. Only successful responses are stored.
"""

import logging
import math
import time

from .api import ApiRequestError


logger = logging.getLogger(__name__)

# Queries whose data changes often enough to refetch after five minutes
STALE_TIMES = {
    '/api/projects': 5 * 60,
    '/api/experiences': 5 * 60,
}

# Admin entity -> cache keys (and everything below them) a write must invalidate
ADMIN_INVALIDATIONS = {
    'projects': ('/api/admin/projects', '/api/projects'),
    'experiences': ('/api/admin/experiences', '/api/experiences'),
    'testimonials': ('/api/admin/testimonials', '/api/testimonials'),
    'skills': ('/api/admin/skills', '/api/skills'),
    'social-profiles': ('/api/admin/social-profiles', '/api/social-profiles'),
    'blog/posts': ('/api/admin/blog/posts', '/api/blog/posts'),
    'blog/comments': ('/api/admin/blog/comments', '/api/blog/posts'),
    'content': ('/api/admin/content', '/api/content'),
    'languages': ('/api/admin/languages', '/api/languages', '/api/translations'),
    'translations': ('/api/admin/translations', '/api/translations'),
    'contacts': ('/api/admin/contacts', '/api/admin/stats'),
    'newsletter': ('/api/admin/newsletter/subscribers', '/api/admin/stats'),
}


class CacheEntry:
    __slots__ = ('data', 'updated_at')

    def __init__(self, data, updated_at):
        self.data = data
        self.updated_at = updated_at


def _path(url):
    return url.split('?', 1)[0]


def _under(key, prefix):
    """True when ``key`` is ``prefix`` or a sub-path / query of it"""
    return key == prefix or key.startswith(prefix.rstrip('/') + '/') or key.startswith(prefix + '?')


class QueryCache:
    """URL keyed cache in front of an ``ApiClient``"""

    def __init__(self, client, default_stale_time=math.inf, stale_times=None, clock=time.monotonic):
        self.client = client
        self.default_stale_time = default_stale_time
        self.stale_times = dict(STALE_TIMES if stale_times is None else stale_times)
        self.clock = clock
        self._entries = {}

    def stale_time_for(self, url):
        return self.stale_times.get(_path(url), self.default_stale_time)

    def is_fresh(self, url, stale_time=None):
        entry = self._entries.get(url)
        if entry is None:
            return False
        if stale_time is None:
            stale_time = self.stale_time_for(url)
        return self.clock() - entry.updated_at < stale_time

    def fetch(self, url, stale_time=None, on_401='throw', force=False):
        """
        Return the cached value for ``url`` while fresh, otherwise GET it.

        Args:
            url (str): Request URL, also the cache key
            stale_time (float, optional): Seconds a value stays fresh
            on_401 (str): ``'throw'`` or ``'return_none'``
            force (bool): Skip the cache and always refetch

        Raises:
            ApiRequestError: when the request fails (nothing is cached)
        """
        if not force and self.is_fresh(url, stale_time):
            return self._entries[url].data

        try:
            data = self.client.request(url)
        except ApiRequestError as e:
            if e.status == 401 and on_401 == 'return_none':
                logger.debug(f"Unauthorized query {url}, returning None")
                return None
            raise

        self.set(url, data)
        return data

    def get(self, url):
        entry = self._entries.get(url)
        return entry.data if entry is not None else None

    def set(self, url, data):
        self._entries[url] = CacheEntry(data, self.clock())

    def invalidate(self, url, prefix=False):
        """Drop ``url`` (and with ``prefix`` every key below it); returns the count"""
        if prefix:
            keys = [key for key in self._entries if _under(key, url)]
        else:
            keys = [url] if url in self._entries else []
        for key in keys:
            del self._entries[key]
        return len(keys)

    def clear(self):
        self._entries.clear()

    def keys(self):
        return list(self._entries)

    def mutate(self, method, url, data=None, invalidates=()):
        """
        Perform a write and, only when it succeeds, invalidate ``invalidates``.

        Each invalidated key also drops its sub-paths and query variants.
        """
        result = self.client.request(url, method=method, data=data)
        for key in invalidates:
            self.invalidate(key, prefix=True)
        return result

    def admin_mutate(self, entity, method, url, data=None):
        """``mutate`` with the invalidations registered for an admin entity"""
        return self.mutate(method, url, data, invalidates=ADMIN_INVALIDATIONS.get(entity, ()))
