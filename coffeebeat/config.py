import os
from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(__file__), '.env'))

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-prod'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///coffeebeat_client.db'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Backend REST API
    BACKEND_URL = os.environ.get('BACKEND_URL') or 'http://localhost:8080'
    API_PREFIX = '/api'
    REQUEST_TIMEOUT = 30

    # Booking refresh
    POLLER_ENABLED = os.environ.get('POLLER_ENABLED', '1') == '1'
    POLL_INTERVAL_SECONDS = int(os.environ.get('POLL_INTERVAL_SECONDS', 30))

    # Venue rules
    VENUE_TIMEZONE = os.environ.get('VENUE_TIMEZONE') or 'Asia/Kolkata'
    SERVICE_DURATION_MINUTES = 120
    LEAD_TIME_MINUTES = 120

    # Checkout
    TAX_RATE = 0.08
    DELIVERY_FEE = 2.99

class DevelopmentConfig(Config):
    DEBUG = True

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    BACKEND_URL = 'http://backend.test'
    POLLER_ENABLED = False
    VENUE_TIMEZONE = 'UTC'

class ProductionConfig(Config):
    DEBUG = False
    # In prod, rely on env vars strictly
