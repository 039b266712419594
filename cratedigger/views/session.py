# cratedigger/views/session.py
'''
This module handles session-related views for the Spotify app.
 - Provides an endpoint to check whether the token cookie still works.
 - Returns user details if authenticated, a 401 if not, and a 500 JSON body if Spotify fails.
'''

import requests
from django.http import JsonResponse
from django.views.decorators.http import require_GET

from ..services import auth as svc
from ..utils import get_access_token
from ._helpers import upstream_failure, upstream_status

@require_GET
def session_me(request):
    token = get_access_token(request)
    if not token:
        return JsonResponse({"authenticated": False}, status=401)
    try:
        me = svc.fetch_me(token)
    except (requests.RequestException, ValueError) as exc:
        if upstream_status(exc) == 401:
            return JsonResponse({"authenticated": False}, status=401)
        return upstream_failure("Failed to fetch session", exc)
    return JsonResponse({
        "authenticated": True,
        "spotify_id": me.get("id"),
        "display_name": me.get("display_name") or me.get("id"),
        "email": me.get("email"),
    })
