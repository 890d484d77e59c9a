import os
from dotenv import load_dotenv

from .errors import ConfigurationError

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(basedir, '.env'))

# Connection parameters that must be present before the app can start
REQUIRED_SETTINGS = ('DATABASE_URL', 'API_ACCESS_KEY')


def normalize_database_url(database_url):
    """Ensure we're using postgresql:// not postgres://"""
    if database_url and database_url.startswith('postgres://'):
        database_url = database_url.replace('postgres://', 'postgresql://', 1)
    return database_url


class Config:
    """Base configuration shared by every environment"""

    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Set in __init__ once the environment has been validated
    SQLALCHEMY_DATABASE_URI = None
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
    }

    API_ACCESS_KEY = None
    API_KEY_HEADER = 'X-API-Key'

    CORS_ORIGINS = [
        'http://localhost:5173',
        'http://127.0.0.1:5173',
        'http://localhost:3000',
    ]
    CORS_SUPPORTS_CREDENTIALS = True

    # Blob storage for the company logo
    AZURE_STORAGE_CONNECTION_STRING = os.environ.get('AZURE_STORAGE_CONNECTION_STRING')
    AZURE_STORAGE_CONTAINER_NAME = os.environ.get('AZURE_STORAGE_CONTAINER_NAME', 'company-assets')
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', 'uploads')
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 5 * 1024 * 1024))

    # Business settings
    ITEMS_PER_PAGE = int(os.environ.get('ITEMS_PER_PAGE', 10))
    QUOTATION_VALIDITY_DAYS = int(os.environ.get('QUOTATION_VALIDITY_DAYS', 30))
    LOCALE = os.environ.get('LOCALE', 'en_US')
    TIMEZONE = os.environ.get('TIMEZONE', 'UTC')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    def __init__(self):
        missing = [name for name in REQUIRED_SETTINGS if not os.environ.get(name)]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        self.SQLALCHEMY_DATABASE_URI = normalize_database_url(os.environ['DATABASE_URL'])
        self.API_ACCESS_KEY = os.environ['API_ACCESS_KEY']


class DevelopmentConfig(Config):
    """Development configuration for local work"""
    DEBUG = True
    DEVELOPMENT = True

    def __init__(self):
        super().__init__()
        self.SQLALCHEMY_ENGINE_OPTIONS = {
            **Config.SQLALCHEMY_ENGINE_OPTIONS,
            'echo': os.environ.get('SQLALCHEMY_ECHO', 'False').lower() in ('true', '1', 't'),
        }


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    DEVELOPMENT = False

    def __init__(self):
        super().__init__()

        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ConfigurationError("SECRET_KEY environment variable is required for production")
        self.SECRET_KEY = secret_key

        origins = os.environ.get('CORS_ORIGINS')
        if origins:
            self.CORS_ORIGINS = [origin.strip() for origin in origins.split(',') if origin.strip()]

        if not self.SQLALCHEMY_DATABASE_URI.startswith('sqlite'):
            self.SQLALCHEMY_ENGINE_OPTIONS = {
                'pool_recycle': 3600,
                'pool_pre_ping': True,
                'pool_size': 10,
                'max_overflow': 20,
                'pool_timeout': 30,
            }


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SECRET_KEY = 'testing-secret-key'

    def __init__(self):
        # Tests never depend on the surrounding environment
        self.SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
        self.API_ACCESS_KEY = 'test-access-key'
        self.AZURE_STORAGE_CONNECTION_STRING = None
        self.CORS_ORIGINS = ['*']


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config_name():
    """Detect the environment from FLASK_ENV, falling back to CI hints"""
    flask_env = os.environ.get('FLASK_ENV', '').lower()
    if flask_env in config:
        return flask_env

    if os.environ.get('TESTING') or os.environ.get('CI'):
        return 'testing'

    return 'development'


__all__ = [
    'config',
    'get_config_name',
    'normalize_database_url',
    'Config',
]
