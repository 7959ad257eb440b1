"""
Portfolio Backend - Main Application Entry Point
Application Factory Pattern for a JSON API

This module initializes the Flask application with all necessary extensions,
configurations, and middleware. All actual route handling is delegated to blueprints.

Run with ``flask --app app run`` or ``gunicorn 'app:create_app()'``.
"""

import os
import time

import click
from flask import Flask, g, jsonify, request, send_from_directory
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from config import get_config
from extensions import db, login_manager
from models import User
from utils.data import ensure_admin_user, seed_default_content
from utils.errors import ApiError, InternalError, Unauthorized
from utils.uploads import get_upload_folder

# Import all blueprints
from blueprints.admin import admin_bp
from blueprints.auth import auth_bp
from blueprints.public import public_bp


def create_app(config_name=None):
    """
    Application Factory Pattern
    Creates and configures Flask application instance

    Args:
        config_name (str): Configuration environment name (optional)

    Returns:
        Flask: Configured Flask application instance
    """

    app = Flask(__name__)

    # Load configuration
    app.config.from_object(get_config(config_name))
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize extensions with app
    initialize_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register request/response hooks
    register_hooks(app)

    # Register flask CLI commands
    register_commands(app)

    # Health check route
    @app.route('/health')
    def health_check():
        return {'status': 'ok', 'message': 'Portfolio API is running'}, 200

    @app.route('/uploads/<path:filename>')
    def uploaded_file(filename):
        """Serve images stored through the admin API"""
        return send_from_directory(get_upload_folder(), filename)

    return app


def initialize_extensions(app):
    """Initialize Flask extensions with the app instance"""
    db.init_app(app)
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        error = Unauthorized()
        return jsonify(error.to_dict()), error.status_code

    # Create tables if they don't exist
    with app.app_context():
        try:
            db.create_all()
            # Verify connection
            db.session.execute(text('SELECT 1'))
            app.logger.info("✓ Database initialized successfully")

            if app.config.get('SEED_DEFAULT_CONTENT'):
                seed_default_content()
            ensure_admin_user()
        except SQLAlchemyError as e:
            db.session.rollback()
            app.logger.error(f"✗ Database initialization failed: {str(e)}")


def register_blueprints(app):
    """Register all application blueprints"""
    app.register_blueprint(auth_bp)
    app.register_blueprint(public_bp)
    app.register_blueprint(admin_bp)


def register_error_handlers(app):
    """Every error leaves the API as JSON with a ``message`` field"""

    @app.errorhandler(ApiError)
    def api_error(e):
        if e.status_code >= 500:
            app.logger.error(f"API Error: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def file_too_large(e):
        limit = app.config.get('MAX_CONTENT_LENGTH') or 0
        message = f'Request is too large. Maximum size is {limit // (1024 * 1024)}MB.'
        return jsonify({'message': message}), 413

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({'message': e.description}), e.code

    @app.errorhandler(Exception)
    def internal_server_error(e):
        db.session.rollback()
        app.logger.exception(f"Server Error: {str(e)}")
        error = InternalError()
        return jsonify(error.to_dict()), error.status_code


def register_hooks(app):
    """Register request/response hooks"""

    @app.before_request
    def before_request():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_api_request(response):
        if request.path.startswith('/api'):
            elapsed = (time.perf_counter() - g.get('request_started', time.perf_counter())) * 1000
            app.logger.info(f"{request.method} {request.path} {response.status_code} in {elapsed:.0f}ms")
        return response

    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses"""
        response.headers['Content-Security-Policy'] = (
            "default-src 'self'; "
            "img-src 'self' data: https:; "
            "frame-ancestors 'none';"
        )
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response


def register_commands(app):
    """Maintenance commands available through ``flask --app app <command>``"""

    @app.cli.command('seed')
    def seed_command():
        """Insert the default site content into empty tables."""
        created = seed_default_content()
        click.echo(f"Seeded {created} rows")

    @app.cli.command('create-admin')
    @click.option('--username', prompt=True)
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
    def create_admin_command(username, password):
        """Create the admin account or reset its password."""
        if len(password) < 8:
            raise click.BadParameter('Password must be at least 8 characters', param_hint='--password')
        user = ensure_admin_user(username, password)
        click.echo(f"Admin user {user.username} is ready")


if __name__ == '__main__':
    # Get environment
    env = os.environ.get('FLASK_ENV', 'development')

    # Create app
    app = create_app(env)

    # Run development server
    app.run(
        host='0.0.0.0',
        port=int(os.environ.get('PORT', 5000)),
        debug=(env == 'development')
    )
