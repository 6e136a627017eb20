"""
Django settings for the todo tracker.

Every deployment-specific value is read from the environment.
"""
import os
from pathlib import Path

from .database import get_database_config

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-local-development-key')

DEBUG = _env_bool('DJANGO_DEBUG', True)

ALLOWED_HOSTS = [h for h in os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if h]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'apps.identity',
    'apps.todos',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'
ASGI_APPLICATION = 'config.asgi.application'

DATABASES = {
    'default': get_database_config(BASE_DIR),
}

AUTH_USER_MODEL = 'identity.User'

# =============================================================================
# Passwords
# =============================================================================
# bcrypt cost factor. conftest.py drops it to the minimum for tests.
PASSWORD_BCRYPT_ROUNDS = int(os.getenv('PASSWORD_BCRYPT_ROUNDS', '12'))

PASSWORD_HASHERS = [
    'apps.identity.passwords.TunableBCryptPasswordHasher',
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# =============================================================================
# Session cookie
# =============================================================================
SESSION_COOKIE_NAME_APP = 'session'
SESSION_MAX_AGE_DAYS = int(os.getenv('SESSION_MAX_AGE_DAYS', '7'))
SESSION_JWT_SECRET = os.getenv('SESSION_JWT_SECRET', SECRET_KEY)
SESSION_STORE_CLASS = 'apps.identity.session.SessionStore'
# Secure flag on the cookie; defaults to production detection when unset
SESSION_COOKIE_PRODUCTION = (
    _env_bool('SESSION_COOKIE_PRODUCTION', False)
    if os.getenv('SESSION_COOKIE_PRODUCTION') is not None
    else None
)

# =============================================================================
# Todos
# =============================================================================
TODO_SEED_PROVIDER = os.getenv('TODO_SEED_PROVIDER', 'apps.todos.seed.default_seed_todos') or None
TODO_DEFAULT_PAGE_SIZE = int(os.getenv('TODO_DEFAULT_PAGE_SIZE', '10'))
TODO_MAX_PAGE_SIZE = int(os.getenv('TODO_MAX_PAGE_SIZE', '100'))

# =============================================================================
# Logging
# =============================================================================
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': os.getenv('DJANGO_LOG_LEVEL', 'WARNING'),
            'propagate': False,
        },
        'apps': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
    },
}
