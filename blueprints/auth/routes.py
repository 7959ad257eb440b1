"""
Auth Routes - Session authentication API
"""

from flask import current_app, jsonify, request
from flask_login import current_user, login_user, logout_user

from utils.data import user_to_dict
from utils.errors import Unauthorized, ValidationError
from utils.security import authenticate, enforce_rate_limit, log_audit_event
from . import auth_bp


@auth_bp.route('/login', methods=['POST'])
def login():
    """Start an admin session"""
    enforce_rate_limit('login')

    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')
    missing = [
        {'field': field, 'message': f'{field.capitalize()} is required'}
        for field, value in (('username', username), ('password', password))
        if not isinstance(value, str) or not value
    ]
    if missing:
        raise ValidationError('Username and password are required', missing)

    try:
        user = authenticate(username, password)
    except Unauthorized:
        log_audit_event('login_failed', username=username)
        raise

    login_user(user)
    log_audit_event('login_success', username=user.username)
    current_app.logger.info(f"User {user.username} logged in")
    return jsonify({'message': 'Login successful', 'user': user_to_dict(user)})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """End the session; succeeds without one too"""
    if current_user.is_authenticated:
        log_audit_event('logout', username=current_user.username)
    logout_user()
    return '', 204


@auth_bp.route('/me')
def me():
    if not current_user.is_authenticated:
        return jsonify({'authenticated': False})
    return jsonify({'authenticated': True, 'user': user_to_dict(current_user)})
