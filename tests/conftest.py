import os
import sys

import pytest
from cryptography.fernet import Fernet

# Ensure project root is on sys.path so 'cratedigger' and 'tests.support' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "cratedigger.settings")
os.environ.setdefault("FERNET_KEY", Fernet.generate_key().decode())

import django  # noqa: E402

django.setup()

from django.test import Client, override_settings  # noqa: E402

from cratedigger.utils import ACCESS_COOKIE, encrypt_token  # noqa: E402
from tests.support.fakes import FakeSpotify  # noqa: E402


@pytest.fixture
def spotify_settings():
    with override_settings(
        SPOTIFY_CLIENT_ID="test-client-id",
        SPOTIFY_CLIENT_SECRET="test-client-secret",
        SPOTIFY_REDIRECT_URI="http://testserver/api/auth/spotify/callback",
        SPOTIFY_SCOPES="playlist-read-private playlist-modify-private",
        APP_URL=None,
    ):
        yield


@pytest.fixture
def spotify(monkeypatch):
    """Replace every Spotify client call made by the service layer."""
    fake = FakeSpotify()
    fake.install(monkeypatch)
    return fake


@pytest.fixture
def client():
    return Client()


@pytest.fixture
def authed_client():
    c = Client()
    c.cookies[ACCESS_COOKIE] = encrypt_token("test-token")
    return c
