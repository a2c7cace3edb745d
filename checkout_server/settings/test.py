"""
Test settings for checkout_server project.
"""

from .base import *

# Use SQLite for testing
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}


# Disable migrations for faster testing
class DisableMigrations:
    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None


MIGRATION_MODULES = DisableMigrations()

# Use faster password hasher for testing
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# Disable logging during tests
LOGGING_CONFIG = None

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

# Side effects run inline so tests can assert on them
POST_PAYMENT_ASYNC = False
PAYMENT_SANDBOX_MODE = False
CHECKOUT_CALLBACK_BASE_URL = 'http://testserver'
