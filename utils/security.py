"""
Security Module - Credentials, rate limiting and audit logging
"""

import json
import os
import time
from datetime import datetime

from flask import current_app, request
from werkzeug.security import check_password_hash, generate_password_hash

from .errors import TooManyRequests, Unauthorized


# Rate Limiting
RATE_LIMIT_REQUESTS = {}  # {ip: [(timestamp, endpoint), ...]}

INVALID_CREDENTIALS_MESSAGE = 'Invalid username or password'

# Compared against when the username does not exist so both failure paths
# cost one hash check.
_DUMMY_PASSWORD_HASH = None


def log_audit_event(event_type, username=None, details=''):
    """Log authentication and administrative events for review"""
    log_data = {
        'event': event_type,
        'username': username,
        'details': details,
        'ip': get_client_ip(),
        'timestamp': datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    }
    current_app.logger.info(f"Audit: {event_type} user={username} ip={log_data['ip']} {details}".rstrip())

    audit_log_file = current_app.config.get('AUDIT_LOG_FILE')
    if not audit_log_file:
        return

    try:
        try:
            with open(audit_log_file, 'r', encoding='utf-8') as f:
                logs = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError):
            logs = []

        logs.append(log_data)
        logs = logs[-1000:]

        directory = os.path.dirname(audit_log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(audit_log_file, 'w', encoding='utf-8') as f:
            json.dump(logs, f, ensure_ascii=False, indent=2)
    except OSError as e:
        current_app.logger.error(f"Error writing audit log: {str(e)}")


def get_client_ip():
    """Get real client IP address"""
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.environ.get('REMOTE_ADDR', 'unknown')


def check_rate_limit(endpoint='contact'):
    """Check if IP is within rate limit"""
    if not current_app.config.get('RATE_LIMIT_ENABLED', True):
        return True

    max_requests = current_app.config.get('RATE_LIMIT_MAX_REQUESTS', 10)
    window = current_app.config.get('RATE_LIMIT_WINDOW', 60)
    client_ip = get_client_ip()
    current_time = time.time()

    # Clean old requests outside the window
    RATE_LIMIT_REQUESTS[client_ip] = [
        (ts, ep) for ts, ep in RATE_LIMIT_REQUESTS.get(client_ip, [])
        if current_time - ts < window
    ]

    endpoint_requests = [
        ep for ts, ep in RATE_LIMIT_REQUESTS[client_ip] if ep == endpoint
    ]
    if len(endpoint_requests) >= max_requests:
        return False

    RATE_LIMIT_REQUESTS[client_ip].append((current_time, endpoint))
    return True


def enforce_rate_limit(endpoint):
    """Raise TooManyRequests when the caller exceeded the limit for ``endpoint``"""
    if not check_rate_limit(endpoint):
        current_app.logger.warning(f"Rate limit exceeded for {get_client_ip()} on {endpoint}")
        raise TooManyRequests()


def hash_password(password):
    return generate_password_hash(password)


def verify_password(password, password_hash):
    """Verify password against hash"""
    return check_password_hash(password_hash, password)


def _dummy_hash():
    global _DUMMY_PASSWORD_HASH
    if _DUMMY_PASSWORD_HASH is None:
        _DUMMY_PASSWORD_HASH = generate_password_hash('not-a-real-password')
    return _DUMMY_PASSWORD_HASH


def authenticate(username, password):
    """
    Return the user matching the credentials.

    Unknown usernames and wrong passwords fail identically.

    Raises:
        Unauthorized: on any mismatch
    """
    from models import User

    user = User.query.filter_by(username=username).first()
    if user is None:
        verify_password(password, _dummy_hash())
        raise Unauthorized(INVALID_CREDENTIALS_MESSAGE)
    if not verify_password(password, user.password_hash):
        raise Unauthorized(INVALID_CREDENTIALS_MESSAGE)
    return user


__all__ = [
    'RATE_LIMIT_REQUESTS',
    'INVALID_CREDENTIALS_MESSAGE',
    'get_client_ip',
    'check_rate_limit',
    'enforce_rate_limit',
    'log_audit_event',
    'hash_password',
    'verify_password',
    'authenticate'
]
