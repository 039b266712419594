# cratedigger/settings.py
"""
Django settings for Crate Digger.
Everything comes from the environment (a local .env is loaded first).
There is no database: the only server-side state is the token cookies.
"""

import os

from dotenv import load_dotenv

load_dotenv()

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-only-secret-key")
DEBUG = os.getenv("DJANGO_DEBUG", "1").lower() in ("1", "true", "yes")
ALLOWED_HOSTS = [
    h.strip()
    for h in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if h.strip()
]

INSTALLED_APPS = [
    "cratedigger.apps.CrateDiggerConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "cratedigger.urls"
WSGI_APPLICATION = "cratedigger.wsgi.application"

DATABASES = {}

USE_TZ = True
APPEND_SLASH = False

# Spotify
SPOTIFY_CLIENT_ID = os.getenv("SPOTIFY_CLIENT_ID")
SPOTIFY_CLIENT_SECRET = os.getenv("SPOTIFY_CLIENT_SECRET")
SPOTIFY_REDIRECT_URI = os.getenv("SPOTIFY_REDIRECT_URI")
SPOTIFY_SCOPES = os.getenv(
    "SPOTIFY_SCOPES",
    " ".join([
        "user-read-private", "user-read-email",
        "playlist-read-private", "playlist-modify-public", "playlist-modify-private",
    ]),
)

# Token cookies are Fernet-encrypted with this key
FERNET_KEY = os.getenv("FERNET_KEY")
COOKIE_SECURE = not DEBUG

# Public origin used for post-login redirects; derived from the Host header when unset
APP_URL = os.getenv("APP_URL")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "cratedigger": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": True,
        },
        "django.request": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    },
}
