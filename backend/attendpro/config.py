# File: backend/attendpro/config.py
"""Configuration module for AttendPro."""
import os
from datetime import timedelta


def storage_engine_options(database_uri, timeout, **options):
    """SQLAlchemy engine options bounding connection checkout and each statement."""
    database_uri = database_uri or ''
    options['pool_timeout'] = timeout

    if database_uri.startswith('sqlite'):
        options['connect_args'] = {'timeout': timeout}
    elif database_uri.startswith('postgresql'):
        options['connect_args'] = {
            'connect_timeout': timeout,
            'options': f'-c statement_timeout={timeout * 1000}'
        }
    elif database_uri.startswith('mysql'):
        options['connect_args'] = {
            'connect_timeout': timeout,
            'read_timeout': timeout,
            'write_timeout': timeout
        }

    return options



class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # JWT Configuration
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=7)
    JWT_ALGORITHM = 'HS256'

    # CORS
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]

    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI') or 'memory://'
    RATELIMIT_DEFAULT = "200 per day, 50 per hour"

    SITE_NAME = os.environ.get('SITE_NAME') or 'AttendancePro'

    # Geofence (single site)
    GEOFENCE_LATITUDE = float(os.environ.get('GEOFENCE_LATITUDE', '-1.2921'))
    GEOFENCE_LONGITUDE = float(os.environ.get('GEOFENCE_LONGITUDE', '36.8219'))
    GEOFENCE_RADIUS_METERS = float(os.environ.get('GEOFENCE_RADIUS_METERS', '100'))

    # QR codes
    QR_VALIDITY_MINUTES = int(os.environ.get('QR_VALIDITY_MINUTES', '5'))
    QR_REGENERATION_SECONDS = int(os.environ.get('QR_REGENERATION_SECONDS', '60'))

    # Attendance time thresholds (HH:MM:SS, server local time)
    WORK_START_TIME = os.environ.get('WORK_START_TIME', '08:00:00')
    LATE_THRESHOLD = os.environ.get('LATE_THRESHOLD', '09:15:00')

    # Callable returning the current local datetime; None means datetime.now
    ATTENDANCE_CLOCK = None

    # Upper bound on a single storage round trip
    STORAGE_TIMEOUT_SECONDS = int(os.environ.get('STORAGE_TIMEOUT_SECONDS', '5'))

    # Pagination
    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DEV_DATABASE_URL') or \
        'sqlite:///attendpro_dev.db'
    SQLALCHEMY_ENGINE_OPTIONS = storage_engine_options(
        SQLALCHEMY_DATABASE_URI, Config.STORAGE_TIMEOUT_SECONDS
    )


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')
    SQLALCHEMY_ENGINE_OPTIONS = storage_engine_options(
        SQLALCHEMY_DATABASE_URI, Config.STORAGE_TIMEOUT_SECONDS, pool_pre_ping=True
    )

    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI') or 'memory://'
    RATELIMIT_DEFAULT = "100 per day, 20 per hour"

    CORS_ORIGINS = [origin for origin in os.environ.get('CORS_ORIGINS', '').split(',') if origin]


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-length'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)
    RATELIMIT_ENABLED = False

    GEOFENCE_LATITUDE = -1.2921
    GEOFENCE_LONGITUDE = 36.8219
    GEOFENCE_RADIUS_METERS = 100.0
    QR_VALIDITY_MINUTES = 5
    WORK_START_TIME = '08:00:00'
    LATE_THRESHOLD = '09:15:00'


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(config_name=None):
    """Get configuration by name."""
    return config.get(config_name or os.environ.get('FLASK_ENV', 'default'), DevelopmentConfig)
