import os
from datetime import timedelta

from sqlalchemy.pool import StaticPool


class Config:
    """Base configuration"""

    # Flask Settings
    SECRET_KEY = os.environ.get('SESSION_SECRET', 'CHANGE-THIS-SECRET-KEY-IN-PRODUCTION')
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    REMEMBER_COOKIE_HTTPONLY = True

    # Database Settings
    _database_url = os.environ.get('DATABASE_URL')
    if not _database_url:
        pg_user = os.environ.get('PGUSER')
        pg_pass = os.environ.get('PGPASSWORD')
        pg_host = os.environ.get('PGHOST')
        pg_port = os.environ.get('PGPORT')
        pg_db = os.environ.get('PGDATABASE')
        if all([pg_user, pg_pass, pg_host, pg_port, pg_db]):
            _database_url = f"postgresql://{pg_user}:{pg_pass}@{pg_host}:{pg_port}/{pg_db}"

    if _database_url and _database_url.startswith("postgres://"):
        _database_url = _database_url.replace("postgres://", "postgresql://", 1)

    SQLALCHEMY_DATABASE_URI = _database_url or 'sqlite:///portfolio.db'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 10,
        'pool_recycle': 3600,
        'pool_pre_ping': True,
    } if _database_url else {}
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upload Settings
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024  # JSON bodies carry base64 images
    MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # decoded image
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', os.path.join('public', 'uploads'))
    UPLOAD_URL_PREFIX = '/uploads'
    ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp', 'svg'}

    # JSON Settings
    JSON_AS_ASCII = False
    JSON_SORT_KEYS = False

    # Admin Settings
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD')
    SEED_DEFAULT_CONTENT = os.environ.get('SEED_DEFAULT_CONTENT', '1') == '1'

    # Admin Notification Settings
    ADMIN_TELEGRAM_BOT_TOKEN = os.environ.get('ADMIN_TELEGRAM_BOT_TOKEN')
    ADMIN_TELEGRAM_CHAT_ID = os.environ.get('ADMIN_TELEGRAM_CHAT_ID')

    # Rate limiting for public write endpoints and login
    RATE_LIMIT_ENABLED = True
    RATE_LIMIT_MAX_REQUESTS = int(os.environ.get('RATE_LIMIT_MAX_REQUESTS', '10'))
    RATE_LIMIT_WINDOW = int(os.environ.get('RATE_LIMIT_WINDOW', '60'))

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    AUDIT_LOG_FILE = os.environ.get('AUDIT_LOG_FILE')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = False
    TESTING = True
    SECRET_KEY = 'testing-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    # A single shared connection keeps the in-memory database alive
    # across requests made by the test client.
    SQLALCHEMY_ENGINE_OPTIONS = {
        'poolclass': StaticPool,
        'connect_args': {'check_same_thread': False},
    }
    SEED_DEFAULT_CONTENT = False
    RATE_LIMIT_ENABLED = False
    ADMIN_USERNAME = None
    ADMIN_PASSWORD = None
    ADMIN_TELEGRAM_BOT_TOKEN = None
    ADMIN_TELEGRAM_CHAT_ID = None
    AUDIT_LOG_FILE = None
    LOG_LEVEL = 'WARNING'


# Select configuration based on environment
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(name=None):
    """Get configuration by name, falling back to FLASK_ENV"""
    env = name or os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
