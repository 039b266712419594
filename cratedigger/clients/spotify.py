# cratedigger/clients/spotify.py
'''
Client layer for Spotify API interactions.
 - Thin wrappers around requests that attach the bearer token.
 - Accepts either an API path ("playlists/abc/tracks") or the absolute `next` URL from a paged response.
 - No retries: callers decide what to do with a failed response.
'''

import requests

BASE = "https://api.spotify.com/v1"
TOKEN_URL = "https://accounts.spotify.com/api/token"
AUTHORIZE_URL = "https://accounts.spotify.com/authorize"

TIMEOUT = 10

def _to_url(path_or_url: str) -> str:
    return path_or_url if path_or_url.startswith("http") else f"{BASE}/{path_or_url.lstrip('/')}"

def _auth(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}"}

def sp_get(access_token: str, path_or_url: str, *, params=None, timeout=TIMEOUT):
    return requests.get(
        _to_url(path_or_url),
        headers=_auth(access_token),
        params=params or {},
        timeout=timeout,
    )

def sp_post_json(access_token: str, path_or_url: str, *, json: dict, timeout=TIMEOUT):
    return requests.post(
        _to_url(path_or_url),
        headers=_auth(access_token),
        json=json,
        timeout=timeout,
    )

def sp_delete_json(access_token: str, path_or_url: str, *, json: dict, timeout=TIMEOUT):
    return requests.delete(
        _to_url(path_or_url),
        headers=_auth(access_token),
        json=json,
        timeout=timeout,
    )

def sp_post_form(url: str, *, data: dict, headers: dict, timeout=TIMEOUT):
    return requests.post(url, data=data, headers=headers, timeout=timeout)
