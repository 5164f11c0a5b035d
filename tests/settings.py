"""Django settings for djust-panel tests."""

import os
import tempfile

# Allow async unsafe operations for testing
os.environ["DJANGO_ALLOW_ASYNC_UNSAFE"] = "true"

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

SECRET_KEY = 'test-secret-key-not-for-production'

DEBUG = True

ALLOWED_HOSTS = ["*"]

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'channels',
    'djust',
    'djust_panel',
    'tests.apps.TestsConfig',
]

# Static files (needed for djust client JavaScript)
STATIC_URL = '/static/'

MEDIA_ROOT = os.path.join(tempfile.gettempdir(), "djust_panel_test_media")
MEDIA_URL = '/media/'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.path.join(os.path.dirname(__file__), 'test_db.sqlite3'),
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'djust-panel-tests',
    }
}

ROOT_URLCONF = 'tests.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

CHANNEL_LAYERS = {
    'default': {
        'BACKEND': 'channels.layers.InMemoryChannelLayer'
    }
}

USE_TZ = True

# Password hashers (faster for tests)
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

MIDDLEWARE = [
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

# Session settings
SESSION_ENGINE = "django.contrib.sessions.backends.db"

# Default auto field
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

DJUST_PANEL = {
    "title": "djust panel tests",
    "route": {"prefix": "admin"},
    "grid": {"per_page": 20},
    "scaffold": {"enable": True, "output_dir": os.path.join(tempfile.gettempdir(), "djust_panel_scaffold")},
}
