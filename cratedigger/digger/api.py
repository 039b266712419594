# cratedigger/digger/api.py
'''
HTTP client for the Crate Digger web service.
The session carries the encrypted token cookies set by the OAuth callback.
Every method is blocking; the async state machine runs them in a worker thread.
'''

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

class ApiError(Exception):
    def __init__(self, status: int, message: str = ""):
        super().__init__(f"{status}: {message}" if message else str(status))
        self.status = status

class NotAuthenticated(ApiError):
    pass

class CrateApi:
    def __init__(self, base_url: str, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _check(self, r) -> Dict[str, Any]:
        if r.status_code == 401:
            raise NotAuthenticated(401, r.text)
        if not r.ok:
            raise ApiError(r.status_code, r.text)
        return r.json()

    def _get(self, path: str, params=None) -> Dict[str, Any]:
        return self._check(self.session.get(f"{self.base_url}{path}", params=params or {}))

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._check(self.session.post(f"{self.base_url}{path}", json=payload))

    def playlists(self) -> Dict[str, Any]:
        return self._get("/api/playlists")

    def playlist_tracks(self, playlist_id: str) -> Dict[str, Any]:
        return self._get("/api/playlist-tracks", {"playlistId": playlist_id})

    def create_playlist(self, name: str) -> Dict[str, Any]:
        return self._post("/api/create-playlist", {"name": name})

    def destination_add(self, playlist_id: str, track_uri: str) -> Dict[str, Any]:
        return self._post("/api/destination-add", {"playlistId": playlist_id, "trackUri": track_uri})

    def remove_from_playlist(self, playlist_id: str, track_uri: str) -> Dict[str, Any]:
        return self._post("/api/remove-from-playlist", {"playlistId": playlist_id, "trackUri": track_uri})

    def itunes_preview(self, track_name: str, artist_name: str) -> Optional[str]:
        data = self._get("/api/itunes-preview", {"trackName": track_name, "artistName": artist_name})
        return data.get("previewUrl")

    def logout(self) -> None:
        self.session.post(f"{self.base_url}/api/auth/spotify/logout", allow_redirects=False)
