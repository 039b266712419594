# cratedigger/views/auth.py
'''
This module handles the authentication flow for Spotify integration.
 - Redirects users to Spotify for login, with a CSRF-safe OAuth state.
 - Handles the callback from Spotify, exchanging the code for tokens and storing them in cookies.
 - Clears the token cookies on logout.
Callback failures never render an error page: the browser is sent home with ?spotify_error=<reason>.
'''

import logging
import urllib.parse

import requests
from django.http import HttpResponseRedirect, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from ..services import auth as svc
from ..utils import set_token_cookies, clear_token_cookies

logger = logging.getLogger(__name__)

def _home_with_error(request, reason: str):
    url = f"{svc.app_origin(request)}/?spotify_error={urllib.parse.quote(reason)}"
    resp = HttpResponseRedirect(url)
    svc.clear_oauth_state(resp)
    return resp

@require_GET
def login_redirect(request):
    missing = svc.missing_config("SPOTIFY_CLIENT_ID", "SPOTIFY_REDIRECT_URI", "SPOTIFY_SCOPES")
    if missing:
        logger.error("Missing Spotify settings: %s", ", ".join(missing))
        return JsonResponse({"error": "Spotify configuration missing"}, status=500)

    state = svc.generate_oauth_state()
    resp = HttpResponseRedirect(svc.authorize_url(state))
    svc.save_oauth_state(resp, state)
    return resp

@require_GET
def auth_callback(request):
    error = request.GET.get("error")
    if error:
        logger.warning("Spotify auth error: %s", error)
        return _home_with_error(request, error)
    code = request.GET.get("code")
    if not code:
        logger.warning("Spotify callback missing code")
        return _home_with_error(request, "missing_code")
    if not svc.validate_oauth_state(request, request.GET.get("state")):
        logger.warning("Spotify callback with invalid OAuth state")
        return _home_with_error(request, "invalid_state")
    if svc.missing_config("SPOTIFY_CLIENT_ID", "SPOTIFY_CLIENT_SECRET", "SPOTIFY_REDIRECT_URI"):
        logger.error("Spotify settings missing during callback")
        return _home_with_error(request, "server_config_missing")

    try:
        token_data = svc.exchange_code_for_tokens(code)
    except requests.HTTPError as exc:
        logger.error("Spotify token exchange failed: %s", exc)
        return _home_with_error(request, "token_exchange_failed")
    except (requests.RequestException, ValueError) as exc:
        logger.exception("Spotify callback internal error: %s", exc)
        return _home_with_error(request, "internal_error")

    resp = HttpResponseRedirect(f"{svc.app_origin(request)}/")
    set_token_cookies(resp, token_data)
    svc.clear_oauth_state(resp)
    return resp

@require_POST
def logout(request):
    resp = HttpResponseRedirect("/")
    clear_token_cookies(resp)
    return resp
