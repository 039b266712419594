# cratedigger/services/playlists.py
'''
This module provides playlist operations for the playlist sidebar and the destination slots.
 - list_user_playlists: All playlists visible to the user, reshaped and flagged with ownership.
 - create_playlist: Create a private playlist for a destination slot.
 - add_track: Add a track to a destination playlist unless it is already near the top of it.
 - remove_track: Remove a track from a (source) playlist.
'''

from __future__ import annotations

import logging
from typing import Dict, Any, List

import requests

from ..clients.spotify import sp_get, sp_post_json, sp_delete_json

logger = logging.getLogger(__name__)

PLAYLIST_PAGE = 50
DUPLICATE_WINDOW = 100
NEW_PLAYLIST_DESCRIPTION = "Created with Crate Digger"

def _shape(pl: Dict[str, Any]) -> Dict[str, Any]:
    owner = pl.get("owner") or {}
    return {
        "id": pl["id"],
        "name": pl["name"],
        "images": pl.get("images") or [],
        "tracks": {"total": (pl.get("tracks") or {}).get("total", 0)},
        "ownerId": owner.get("id"),
        "ownerName": owner.get("display_name"),
    }

def list_user_playlists(token: str) -> Dict[str, Any]:
    """
    { items: [Playlist + isOwned], currentUserId } across every page of /me/playlists.
    """
    me = sp_get(token, "me")
    me.raise_for_status()
    current_user_id = me.json().get("id")

    raw: List[Dict[str, Any]] = []
    url = f"me/playlists?limit={PLAYLIST_PAGE}"
    while url:
        r = sp_get(token, url)
        r.raise_for_status()
        data = r.json()
        raw.extend(pl for pl in data.get("items", []) if pl)
        url = data.get("next")

    items = []
    for pl in raw:
        shaped = _shape(pl)
        shaped["isOwned"] = shaped["ownerId"] is not None and shaped["ownerId"] == current_user_id
        items.append(shaped)
    return {"items": items, "currentUserId": current_user_id}

def create_playlist(token: str, name: str) -> Dict[str, Any]:
    r = sp_post_json(
        token,
        "me/playlists",
        json={"name": name, "public": False, "description": NEW_PLAYLIST_DESCRIPTION},
    )
    r.raise_for_status()
    created = _shape(r.json())
    logger.info("Created playlist %s (%s)", created["id"], name)
    return created

def _already_in_playlist(token: str, pid: str, track_uri: str) -> bool:
    """
    Best-effort duplicate check over the first DUPLICATE_WINDOW entries only.
    """
    r = sp_get(
        token,
        f"playlists/{pid}/tracks",
        params={"limit": DUPLICATE_WINDOW, "offset": 0, "fields": "items(track(uri))"},
    )
    r.raise_for_status()
    return any(
        (item.get("track") or {}).get("uri") == track_uri
        for item in r.json().get("items") or []
    )

def add_track(token: str, pid: str, track_uri: str) -> Dict[str, Any]:
    try:
        if _already_in_playlist(token, pid, track_uri):
            return {"added": False, "reason": "duplicate", "playlistId": pid}
    except (requests.RequestException, ValueError) as exc:
        # still try the add
        logger.warning("Duplicate check failed for playlist %s: %s", pid, exc)

    r = sp_post_json(token, f"playlists/{pid}/tracks", json={"uris": [track_uri]})
    r.raise_for_status()
    return {"added": True, "playlistId": pid}

def remove_track(token: str, pid: str, track_uri: str) -> Dict[str, Any]:
    r = sp_delete_json(token, f"playlists/{pid}/tracks", json={"tracks": [{"uri": track_uri}]})
    r.raise_for_status()
    return {"removed": True, "playlistId": pid, "trackUri": track_uri}
