# cratedigger/services/previews.py
'''
Fallback preview lookup against iTunes search. Always answers; failures degrade to None.
'''

from __future__ import annotations

import logging

import requests

from ..clients.itunes import search_songs

logger = logging.getLogger(__name__)

def itunes_preview_url(track_name: str, artist_name: str) -> str | None:
    query = f"{track_name} {artist_name}".strip()
    if not query:
        return None

    try:
        r = search_songs(query, limit=1)
    except requests.RequestException as exc:
        logger.warning("iTunes search failed for %r: %s", query, exc)
        return None
    if not r.ok:
        logger.warning("iTunes search error status: %s", r.status_code)
        return None

    try:
        results = r.json().get("results") or []
    except ValueError:
        logger.warning("iTunes search returned invalid JSON for %r", query)
        return None
    if not results:
        return None
    return results[0].get("previewUrl")
