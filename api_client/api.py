"""
API Module - JSON request helper

Cookies held by the ``requests.Session`` are the credentials, so one client
per browser-like session.
"""

import json
import logging

import requests


logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    'Content-Type': 'application/json',
    'Accept': 'application/json'
}


class ApiRequestError(Exception):
    """Non-2xx response; the text reads ``"<status>: <body>"``"""

    def __init__(self, status, body):
        super().__init__(f"{status}: {body}")
        self.status = status
        self.body = body


class ApiClient:
    """Thin wrapper around a requests session speaking JSON"""

    def __init__(self, base_url='', session=None, timeout=None):
        self.base_url = base_url.rstrip('/')
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def request(self, url, method='GET', headers=None, data=None, timeout=None):
        """
        Send a request and return the decoded JSON body.

        Args:
            url (str): Path (joined to ``base_url``) or absolute URL
            method (str): HTTP method
            headers (dict, optional): Extra headers, override the JSON defaults
            data (optional): Body, serialized as JSON when not None

        Returns:
            The parsed JSON body, or None for 204 No Content

        Raises:
            ApiRequestError: for any non-2xx response (never retried)
        """
        merged_headers = dict(DEFAULT_HEADERS)
        if headers:
            merged_headers.update(headers)
        body = json.dumps(data) if data is not None else None

        logger.debug(f"API request: {method} {url}")
        response = self.session.request(
            method,
            self._full_url(url),
            headers=merged_headers,
            data=body,
            timeout=timeout if timeout is not None else self.timeout
        )

        if not response.ok:
            text = response.text or response.reason
            logger.debug(f"API error ({response.status_code}): {text}")
            raise ApiRequestError(response.status_code, text)

        if response.status_code == 204:
            return None
        return response.json()

    def _full_url(self, url):
        if url.startswith(('http://', 'https://')):
            return url
        return f"{self.base_url}{url}"
