# cratedigger/services/tracks.py
'''
This module builds the full track listing for one playlist.
 - playlist_tracks: Every page of /playlists/{id}/tracks, enriched with the union of each track's artist genres.
Pagination failures propagate; genre enrichment is best-effort.
'''

from __future__ import annotations

import logging
from typing import Dict, Any, List

import requests

from ..clients.spotify import sp_get

logger = logging.getLogger(__name__)

TRACK_PAGE = 100
ARTIST_BATCH = 50

def _empty_page() -> Dict[str, Any]:
    return {
        "href": None,
        "items": [],
        "limit": TRACK_PAGE,
        "next": None,
        "offset": 0,
        "previous": None,
        "total": 0,
    }

def fetch_all_items(token: str, pid: str) -> tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """
    Follow `next` until exhausted. Returns (first page envelope, all items in upstream order).
    """
    base = None
    items: List[Dict[str, Any]] = []
    url = f"playlists/{pid}/tracks?limit={TRACK_PAGE}"
    while url:
        r = sp_get(token, url)
        r.raise_for_status()
        page = r.json()
        if base is None:
            base = page
        items.extend(page.get("items") or [])
        url = page.get("next")
    return base or _empty_page(), items

def artist_ids_of(items: List[Dict[str, Any]]) -> List[str]:
    seen: Dict[str, None] = {}
    for item in items:
        track = item.get("track")
        if not track:
            continue
        for artist in track.get("artists") or []:
            if artist and artist.get("id"):
                seen.setdefault(artist["id"], None)
    return list(seen)

def artist_genres(token: str, artist_ids: List[str]) -> Dict[str, List[str]]:
    genres: Dict[str, List[str]] = {}
    for i in range(0, len(artist_ids), ARTIST_BATCH):
        chunk = artist_ids[i:i + ARTIST_BATCH]
        r = sp_get(token, "artists", params={"ids": ",".join(chunk)})
        r.raise_for_status()
        for artist in r.json().get("artists") or []:
            if artist and artist.get("id"):
                genres[artist["id"]] = artist.get("genres") or []
    return genres

def with_genres(item: Dict[str, Any], genres: Dict[str, List[str]]) -> Dict[str, Any]:
    track = item.get("track")
    if not track or not track.get("artists"):
        return item
    merged: Dict[str, None] = {}
    for artist in track["artists"]:
        for genre in genres.get((artist or {}).get("id"), []):
            merged.setdefault(genre, None)
    return {**item, "artist_genres": list(merged)}

def playlist_tracks(token: str, pid: str) -> Dict[str, Any]:
    """
    Same shape as Spotify's playlist-tracks page, but with all items and `artist_genres` on each.
    """
    base, items = fetch_all_items(token, pid)

    ids = artist_ids_of(items)
    try:
        genres = artist_genres(token, ids) if ids else {}
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Artist genre lookup failed for playlist %s, returning tracks without genres: %s", pid, exc)
        return {**base, "items": items}

    return {**base, "items": [with_genres(it, genres) for it in items]}
