# cratedigger/views/tracks.py
'''
This module handles views related to tracks for the Spotify app.
- Full track listing (all pages + artist genres) for one playlist.
- Fallback iTunes preview lookup.
'''

from django.http import JsonResponse, HttpResponseBadRequest
from django.views.decorators.http import require_GET

from ..services.tracks import playlist_tracks as svc_playlist_tracks
from ..services.previews import itunes_preview_url
from ._helpers import spotify_view

@require_GET
@spotify_view("Failed to fetch tracks")
def playlist_tracks(request, token):
    pid = request.GET.get("playlistId")
    if not pid:
        return HttpResponseBadRequest("Missing playlistId")
    return JsonResponse(svc_playlist_tracks(token, pid))

@require_GET
def itunes_preview(request):
    url = itunes_preview_url(
        request.GET.get("trackName", ""),
        request.GET.get("artistName", ""),
    )
    return JsonResponse({"previewUrl": url})
