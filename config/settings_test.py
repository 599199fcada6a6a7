"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Test settings. SQLite database, fast hashing and tables
             built straight from the models.
-------------------------------------------------------------------------
"""
from .settings import *  # noqa: F401,F403


class DisableMigrations:
    """Build test tables from the current models instead of migrations."""

    def __contains__(self, item) -> bool:
        return True

    def __getitem__(self, item):
        return None


DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db_test.sqlite3',
    }
}

MIGRATION_MODULES = DisableMigrations()

# Speed up tests
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# Keep test output quiet
LOGGING['loggers'] = {
    name: {**config, 'handlers': ['file']}
    for name, config in LOGGING['loggers'].items()
}
