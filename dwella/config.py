import os
# Define the base directory for the database file (the project root)
BASEDIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
DB_PATH = os.path.join(BASEDIR, 'dwella.db')


class EngineConfig:
    # Pagination defaults used by every list view
    DEFAULT_PAGE_SIZE = int(os.environ.get('DWELLA_DEFAULT_PAGE_SIZE', 12))
    MAX_PAGE_SIZE = int(os.environ.get('DWELLA_MAX_PAGE_SIZE', 100))
    # Strict: bad page requests raise. Non-strict: clamp and log a warning.
    STRICT_PAGINATION = os.environ.get('DWELLA_STRICT_PAGINATION', '1') == '1'
    # Strict: mark-read on never-seen ids raises StaleMutationError
    STRICT_NOTIFICATIONS = os.environ.get('DWELLA_STRICT_NOTIFICATIONS', '0') == '1'
    NOTIFICATION_PREVIEW_LIMIT = int(os.environ.get('DWELLA_NOTIFICATION_PREVIEW_LIMIT', 5))
    # Per-user notification sessions kept in memory; least recently used go first
    NOTIFICATION_SESSION_LIMIT = int(os.environ.get('DWELLA_NOTIFICATION_SESSIONS', 1000))
    # Occupancy filter bands (percent)
    HIGH_OCCUPANCY = int(os.environ.get('DWELLA_HIGH_OCCUPANCY', 90))
    LOW_OCCUPANCY = int(os.environ.get('DWELLA_LOW_OCCUPANCY', 50))


class Config:
    """Base configuration class."""
    # Defaulting to a file-based SQLite database
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + DB_PATH
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Secret Key is required by Flask
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a-very-secret-and-hard-to-guess-string'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    # Load the demo portfolio on startup when the database is empty
    SEED_DEMO_DATA = os.environ.get('DWELLA_SEED_DEMO_DATA', '0') == '1'


class TestingConfig(Config):
    """Configuration used specifically for running Pytest."""
    TESTING = True
    # Crucial: Use an in-memory SQLite database for fast, isolated testing
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ECHO = False
    LOG_LEVEL = 'WARNING'
    SEED_DEMO_DATA = False
