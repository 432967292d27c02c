"""
Django settings for the advocacy site.

Environment variables (or a .env file next to manage.py) override the
defaults below through django-environ.
"""

from pathlib import Path
from typing import Any

import environ

BASE_DIR: Path = Path(__file__).resolve().parent.parent

env: environ.Env = environ.Env(
    DEBUG=(bool, False),
    SECRET_KEY=(str, "django-insecure-development-key"),
    ALLOWED_HOSTS=(list, ["localhost", "127.0.0.1"]),
    LOG_LEVEL=(str, "INFO"),
    ADVOCACY_DATA_DIR=(str, ""),
    ADVOCACY_TARGET_BATCH_SIZE=(int, 500),
    ADVOCACY_LETTER_CACHE_DAYS=(int, 7),
    ADVOCACY_WARM_DATASETS=(bool, True),
    GOOGLE_SHEETS_TIMEOUT=(int, 30),
)

environ.Env.read_env(BASE_DIR / ".env")

DEBUG: bool = env("DEBUG")
SECRET_KEY: str = env("SECRET_KEY")
ALLOWED_HOSTS: list[str] = env("ALLOWED_HOSTS")

if SECRET_KEY.startswith("django-insecure-") and not DEBUG:
    import warnings

    warnings.warn(
        "Using the insecure development SECRET_KEY. Set SECRET_KEY for production!",
        UserWarning,
        stacklevel=2,
    )

INSTALLED_APPS: list[str] = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "advocacy",
]

MIDDLEWARE: list[str] = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF: str = "advocacy_site.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION: str = "advocacy_site.wsgi.application"

# Use DATABASE_URL if available, otherwise fall back to SQLite
DATABASES = {
    "default": env.db("DATABASE_URL", default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}")
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Letter cache lives in the session; keep it for the cache retention window
SESSION_COOKIE_AGE = env("ADVOCACY_LETTER_CACHE_DAYS") * 24 * 60 * 60

# Advocacy app
ADVOCACY_DATA_DIR = env("ADVOCACY_DATA_DIR") or None
ADVOCACY_EXCLUDED_PARTIES: dict[str, list[str]] = {
    "DE": ["AfD"],
}
ADVOCACY_TARGET_BATCH_SIZE: int = env("ADVOCACY_TARGET_BATCH_SIZE")
ADVOCACY_LETTER_CACHE_DAYS: int = env("ADVOCACY_LETTER_CACHE_DAYS")
ADVOCACY_WARM_DATASETS: bool = env("ADVOCACY_WARM_DATASETS")
GOOGLE_SHEETS_TIMEOUT: int = env("GOOGLE_SHEETS_TIMEOUT")

LOGGING: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {name} {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "level": "DEBUG",
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "advocacy": {
            "handlers": ["console"],
            "level": env("LOG_LEVEL"),
            "propagate": False,
        },
    },
}
