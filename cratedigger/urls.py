# cratedigger/urls.py
from django.urls import path
from .views import auth, session, playlists, root, tracks

urlpatterns = [
    # Root + health
    path("", root.root),
    path("health", root.health),

    # Auth
    path("api/auth/spotify/login", auth.login_redirect),
    path("api/auth/spotify/callback", auth.auth_callback),
    path("api/auth/spotify/logout", auth.logout),

    # Session
    path("api/session", session.session_me),

    # Playlists
    path("api/playlists", playlists.get_playlists),
    path("api/create-playlist", playlists.create_playlist),
    path("api/destination-add", playlists.destination_add),
    path("api/remove-from-playlist", playlists.remove_from_playlist),

    # Tracks + previews
    path("api/playlist-tracks", tracks.playlist_tracks),
    path("api/itunes-preview", tracks.itunes_preview),
]
