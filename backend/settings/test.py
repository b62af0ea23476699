from .base import *

DEBUG = False

SECRET_KEY = 'test-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'cardstore-test',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

ALLOWED_HOSTS = ['testserver']

FRONTEND_KEY = ''
SITE_NAME = 'Card Store'
SITE_DESCRIPTION = 'Automatic delivery store for digital goods'
ORDER_EXPIRE_MINUTES = 5
