# cratedigger/views/playlists.py
'''
This module handles playlist-related views for the Spotify app.
- Lists the user's playlists (with ownership), creates destination playlists,
  and adds/removes single tracks.
'''

from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from ..services import playlists as svc
from ._helpers import spotify_view, json_body

def _require_fields(body: dict, *names: str):
    if all(body.get(n) for n in names):
        return None
    return JsonResponse({"error": f"{' and '.join(names)} are required"}, status=400)

@require_GET
@spotify_view("Failed to fetch playlists")
def get_playlists(request, token):
    return JsonResponse(svc.list_user_playlists(token))

@require_POST
@spotify_view("Spotify API error while creating playlist")
def create_playlist(request, token):
    name = json_body(request).get("name")
    if not isinstance(name, str) or not name.strip():
        return JsonResponse({"error": "Playlist name is required"}, status=400)
    return JsonResponse(svc.create_playlist(token, name.strip()))

@require_POST
@spotify_view("Spotify API error while adding track")
def destination_add(request, token):
    body = json_body(request)
    bad = _require_fields(body, "playlistId", "trackUri")
    if bad:
        return bad
    return JsonResponse(svc.add_track(token, body["playlistId"], body["trackUri"]))

@require_POST
@spotify_view("Spotify API error while removing track")
def remove_from_playlist(request, token):
    body = json_body(request)
    bad = _require_fields(body, "playlistId", "trackUri")
    if bad:
        return bad
    return JsonResponse(svc.remove_track(token, body["playlistId"], body["trackUri"]))
