import os
from datetime import timedelta
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///quickbite.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'jwt-secret-key'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.environ.get('JWT_EXPIRES_HOURS', 12)))

    # Shared staff passwords, checked server side and exchanged for a role token
    KITCHEN_PASSWORD = os.environ.get('KITCHEN_PASSWORD') or 'kitchen123'
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD') or 'admin123'

    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')

    # Order handling
    ENFORCE_STATUS_TRANSITIONS = _env_flag('ENFORCE_STATUS_TRANSITIONS', 'true')
    ESTIMATED_PREP_MINUTES = int(os.environ.get('ESTIMATED_PREP_MINUTES', 30))

    # Pagination
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100

    # Set to a redis:// URL when running several workers behind a load balancer
    SOCKETIO_MESSAGE_QUEUE = os.environ.get('SOCKETIO_MESSAGE_QUEUE')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    DEBUG = _env_flag('DEBUG', 'false')


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///quickbite.db'
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(Config):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')  # Must be set in production


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    JWT_SECRET_KEY = 'testing-jwt-secret-key-with-enough-length'
    KITCHEN_PASSWORD = 'kitchen-pass'
    ADMIN_PASSWORD = 'admin-pass'
    ENFORCE_STATUS_TRANSITIONS = True
    SOCKETIO_MESSAGE_QUEUE = None
    LOG_LEVEL = 'WARNING'
