"""Configuration module for Flask application."""
import os
import tempfile
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '1') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')
    TESTING = False
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Error tracking (production only, enabled when a DSN is set)
    SENTRY_DSN = os.getenv('SENTRY_DSN')
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv('SENTRY_TRACES_SAMPLE_RATE', '0.1'))

    # Session Configuration (Production-safe defaults)
    SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', 'false').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv('SESSION_COOKIE_SAMESITE', 'Lax')
    PERMANENT_SESSION_LIFETIME = 86400  # 24 hours

    # Database - Support multiple environment variable naming conventions
    # Priority: DATABASE_URL > DB_* > POSTGRES_*
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        # Try DB_* variables (Docker style)
        DB_HOST = os.getenv('DB_HOST') or os.getenv('POSTGRES_HOST', 'localhost')
        DB_PORT = os.getenv('DB_PORT') or os.getenv('POSTGRES_PORT', '5432')
        DB_NAME = os.getenv('DB_NAME') or os.getenv('POSTGRES_DB', 'warranty')
        DB_USER = os.getenv('DB_USER') or os.getenv('POSTGRES_USER', 'warranty')
        DB_PASSWORD = os.getenv('DB_PASSWORD') or os.getenv('POSTGRES_PASSWORD', 'warranty')

        DATABASE_URL = (
            f"postgresql://{DB_USER}:{DB_PASSWORD}"
            f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        )

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', '0') == '1'

    # Public activation URL embedded in every QR code: {PUBLIC_BASE_URL}/product/{token}
    PUBLIC_BASE_URL = os.getenv('PUBLIC_BASE_URL', 'https://warranty.com')
    QR_IMAGE_SIZE = int(os.getenv('QR_IMAGE_SIZE', '200'))  # pixels

    # Sticker sheet grid (A4). 5 x 5 = 25 stickers per page.
    STICKER_COLUMNS = int(os.getenv('STICKER_COLUMNS', '5'))
    STICKER_ROWS = int(os.getenv('STICKER_ROWS', '5'))

    # Unit generation
    MAX_BATCH_QUANTITY = int(os.getenv('MAX_BATCH_QUANTITY', '100000'))
    IDENTIFIER_MAX_RETRIES = int(os.getenv('IDENTIFIER_MAX_RETRIES', '5'))

    # Analytics
    WARRANTY_EXPIRING_DAYS = int(os.getenv('WARRANTY_EXPIRING_DAYS', '30'))

    # Pagination defaults
    DEFAULT_PAGE_SIZE = int(os.getenv('DEFAULT_PAGE_SIZE', '10'))
    MAX_PAGE_SIZE = int(os.getenv('MAX_PAGE_SIZE', '100'))


class TestConfig(Config):
    """Configuration used by the test suite (SQLite, no debug echo)."""

    TESTING = True
    DEBUG = False
    ENV = 'testing'
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'TEST_DATABASE_URL',
        'sqlite:///' + os.path.join(tempfile.gettempdir(), 'warranty_test.db')
    )
