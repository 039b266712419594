# cratedigger/utils.py
import logging

from cryptography.fernet import Fernet, InvalidToken
from django.conf import settings

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "spotify_access_token"
REFRESH_COOKIE = "spotify_refresh_token"
STATE_COOKIE = "spotify_oauth_state"

REFRESH_MAX_AGE = 60 * 60 * 24 * 30

def _fernet() -> Fernet:
    key = settings.FERNET_KEY
    if not key:
        raise RuntimeError("FERNET_KEY is not configured")
    return Fernet(key.encode())

def encrypt_token(token: str) -> str:
    return _fernet().encrypt(token.encode()).decode()

def decrypt_token(token: str) -> str:
    return _fernet().decrypt(token.encode()).decode()

def _cookie_opts() -> dict:
    return {"httponly": True, "secure": settings.COOKIE_SECURE, "samesite": "Lax", "path": "/"}

def set_token_cookies(response, token_data: dict) -> None:
    """
    Store the access token (and refresh token, when Spotify sent one) as encrypted HTTP-only cookies.
    """
    expires_in = int(token_data.get("expires_in") or 3600)
    response.set_cookie(
        ACCESS_COOKIE, encrypt_token(token_data["access_token"]), max_age=expires_in, **_cookie_opts()
    )
    refresh_token = token_data.get("refresh_token")
    if refresh_token:
        response.set_cookie(
            REFRESH_COOKIE, encrypt_token(refresh_token), max_age=REFRESH_MAX_AGE, **_cookie_opts()
        )

def clear_token_cookies(response) -> None:
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.set_cookie(name, "", max_age=0, **_cookie_opts())

def get_access_token(request) -> str | None:
    """
    Bearer token from the request cookies, or None when absent or undecryptable.
    """
    raw = request.COOKIES.get(ACCESS_COOKIE)
    if not raw:
        return None
    try:
        return decrypt_token(raw)
    except InvalidToken:
        logger.warning("Discarding undecryptable access token cookie")
        return None
