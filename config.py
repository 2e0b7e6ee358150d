"""Configuration module for the POS Flask application."""
import os
from decimal import Decimal
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '0') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')
    TESTING = False

    # CSRF (Flask-WTF)
    WTF_CSRF_ENABLED = os.getenv('WTF_CSRF_ENABLED', 'true').lower() == 'true'

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Database - local relational store (SQLite by default)
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///pos.db')

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'
    DB_CREATE_ALL = os.getenv('DB_CREATE_ALL', 'true').lower() == 'true'

    # Sales
    TAX_RATE = Decimal('0.16')  # Fixed VAT, toggled by receipt_settings.enable_tax
    ALLOW_NEGATIVE_STOCK = os.getenv('ALLOW_NEGATIVE_STOCK', 'true').lower() == 'true'
    WHOLESALE_GLOBAL_RESWEEP = os.getenv('WHOLESALE_GLOBAL_RESWEEP', 'false').lower() == 'true'

    # Reports (0 = Sunday, 1 = Monday, ...)
    WEEK_START_DAY = int(os.getenv('WEEK_START_DAY', '0'))


class TestingConfig(Config):
    """Configuration used by the test-suite."""

    TESTING = True
    WTF_CSRF_ENABLED = False
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ECHO = False
    DB_CREATE_ALL = True
    ALLOW_NEGATIVE_STOCK = True
    WHOLESALE_GLOBAL_RESWEEP = False
