# cratedigger/views/_helpers.py
'''
Shared plumbing for the API views.
 - spotify_view: resolves the bearer token from the cookies and maps upstream failures to JSON responses.
 - upstream_failure: the 500 JSON body for a failed upstream call.
 - json_body: tolerant JSON request body parsing.
'''

import functools
import json
import logging

import requests
from django.http import JsonResponse

from ..utils import get_access_token

logger = logging.getLogger(__name__)

def not_authenticated():
    return JsonResponse({"error": "Not authenticated"}, status=401)

def upstream_status(exc: Exception):
    resp = getattr(exc, "response", None)
    return resp.status_code if resp is not None else None

def _details(exc: Exception):
    resp = getattr(exc, "response", None)
    if resp is None:
        return str(exc)
    try:
        return resp.json()
    except ValueError:
        return resp.text

def upstream_failure(failure_message: str, exc: Exception) -> JsonResponse:
    logger.error("%s: %s", failure_message, exc)
    return JsonResponse({"error": failure_message, "details": _details(exc)}, status=500)

def spotify_view(failure_message: str):
    """
    Decorate a view taking (request, token, ...). Missing token -> 401; Spotify 401 -> 401;
    any other upstream failure, including an unreadable JSON body -> 500 with `failure_message`
    and the upstream details.
    """
    def decorator(view):
        @functools.wraps(view)
        def wrapper(request, *args, **kwargs):
            token = get_access_token(request)
            if not token:
                return not_authenticated()
            try:
                return view(request, token, *args, **kwargs)
            except (requests.RequestException, ValueError) as exc:
                if upstream_status(exc) == 401:
                    return JsonResponse({"error": "Unauthorized"}, status=401)
                return upstream_failure(failure_message, exc)
        return wrapper
    return decorator

def json_body(request) -> dict:
    try:
        data = json.loads(request.body or b"{}")
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
