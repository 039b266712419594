# cratedigger/services/auth.py
"""
Auth/service layer for Spotify OAuth.
- Builds the authorize URL.
- Exchanges authorization codes for tokens.
- Fetches the user's Spotify profile.
- Provides helpers to generate/validate OAuth `state` for CSRF protection.
  The state travels in a signed, short-lived cookie since there is no server session.
"""

from __future__ import annotations

import base64
import secrets
import urllib.parse
from typing import Dict, Any

from django.conf import settings
from django.core import signing

from ..clients.spotify import AUTHORIZE_URL, TOKEN_URL, sp_get, sp_post_form
from ..utils import STATE_COOKIE

STATE_MAX_AGE = 600
_STATE_SALT = "cratedigger.oauth-state"

# ---- Config ------------------------------------------------------------------

def missing_config(*names: str) -> list[str]:
    """
    Names of the given settings that are empty.
    """
    return [n for n in names if not getattr(settings, n, None)]

# ---- OAuth state helpers (CSRF protection) ---------------------------------

def generate_oauth_state(length: int = 24) -> str:
    """
    Create a cryptographically-strong random state string to send to Spotify.
    """
    return secrets.token_urlsafe(length)

def save_oauth_state(response, state: str) -> None:
    response.set_signed_cookie(
        STATE_COOKIE, state, salt=_STATE_SALT, max_age=STATE_MAX_AGE,
        httponly=True, secure=settings.COOKIE_SECURE, samesite="Lax", path="/",
    )

def validate_oauth_state(request, received_state: str | None) -> bool:
    """
    Compare received state to the signed cookie. Expired or tampered cookies fail.
    """
    expected = request.get_signed_cookie(
        STATE_COOKIE, default=None, salt=_STATE_SALT, max_age=STATE_MAX_AGE
    )
    return bool(expected) and (received_state == expected)

def clear_oauth_state(response) -> None:
    response.delete_cookie(STATE_COOKIE, path="/")

def authorize_url(state: str) -> str:
    params = {
        "client_id": settings.SPOTIFY_CLIENT_ID,
        "response_type": "code",
        "redirect_uri": settings.SPOTIFY_REDIRECT_URI,
        "scope": settings.SPOTIFY_SCOPES,
        "state": state,
    }
    return AUTHORIZE_URL + "?" + urllib.parse.urlencode(params)

def app_origin(request) -> str:
    """
    Where to send the browser after login: APP_URL when configured, else the Host header
    (plain http for localhost/127.0.0.1, https otherwise).
    """
    if settings.APP_URL:
        return settings.APP_URL.rstrip("/")
    host = request.get_host()
    scheme = "http" if host.startswith(("127.0.0.1", "localhost", "testserver")) else "https"
    return f"{scheme}://{host}"

# ---- Token exchange + profile ----------------------------------------------

def exchange_code_for_tokens(code: str) -> Dict[str, Any]:
    """
    Exchange an auth code for { access_token, refresh_token, expires_in, ... }.
    Raises for non-200 responses.
    """
    auth_header = base64.b64encode(
        f"{settings.SPOTIFY_CLIENT_ID}:{settings.SPOTIFY_CLIENT_SECRET}".encode()
    ).decode()

    payload = {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": settings.SPOTIFY_REDIRECT_URI,
    }
    headers = {
        "Authorization": f"Basic {auth_header}",
        "Content-Type": "application/x-www-form-urlencoded",
    }

    r = sp_post_form(TOKEN_URL, data=payload, headers=headers)
    r.raise_for_status()
    return r.json()

def fetch_me(access_token: str) -> Dict[str, Any]:
    """
    GET /v1/me using the provided access token. Raises on non-200.
    """
    r = sp_get(access_token, "me")
    r.raise_for_status()
    return r.json()
