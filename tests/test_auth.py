import urllib.parse

import pytest
import requests

from cratedigger.clients.spotify import TOKEN_URL
from cratedigger.utils import ACCESS_COOKIE, REFRESH_COOKIE, STATE_COOKIE, decrypt_token
from tests.support.fakes import FakeResponse


def _login(c):
    r = c.get("/api/auth/spotify/login")
    assert r.status_code == 302
    query = urllib.parse.parse_qs(urllib.parse.urlparse(r["Location"]).query)
    return r, query["state"][0]


@pytest.mark.unit
def test_login_redirects_to_spotify_with_state(client, spotify_settings):
    r, state = _login(client)

    location = urllib.parse.urlparse(r["Location"])
    assert location.netloc == "accounts.spotify.com"
    query = urllib.parse.parse_qs(location.query)
    assert query["client_id"] == ["test-client-id"]
    assert query["response_type"] == ["code"]
    assert query["scope"] == ["playlist-read-private playlist-modify-private"]
    assert state
    assert STATE_COOKIE in r.cookies
    assert r.cookies[STATE_COOKIE]["httponly"]


@pytest.mark.unit
def test_login_without_config_is_500(client, settings_without_client_id):
    r = client.get("/api/auth/spotify/login")
    assert r.status_code == 500
    assert r.json() == {"error": "Spotify configuration missing"}


@pytest.fixture
def settings_without_client_id(spotify_settings):
    from django.test import override_settings

    with override_settings(SPOTIFY_CLIENT_ID=None):
        yield


@pytest.mark.unit
def test_callback_sets_encrypted_token_cookies(client, spotify_settings, spotify):
    spotify.on("POST", TOKEN_URL, FakeResponse(200, {
        "access_token": "acc-1", "refresh_token": "ref-1", "expires_in": 1800, "token_type": "Bearer",
    }))
    _, state = _login(client)

    r = client.get("/api/auth/spotify/callback", {"code": "abc", "state": state})

    assert r.status_code == 302
    assert r["Location"] == "http://testserver/"
    access = r.cookies[ACCESS_COOKIE]
    assert decrypt_token(access.value) == "acc-1"
    assert access["httponly"]
    assert access["max-age"] == 1800
    assert decrypt_token(r.cookies[REFRESH_COOKIE].value) == "ref-1"

    form = spotify.calls_to("POST", TOKEN_URL)[0][2]
    assert form["data"]["grant_type"] == "authorization_code"
    assert form["data"]["code"] == "abc"
    assert form["headers"]["Authorization"].startswith("Basic ")


@pytest.mark.unit
def test_callback_without_refresh_token_only_sets_access_cookie(client, spotify_settings, spotify):
    spotify.on("POST", TOKEN_URL, FakeResponse(200, {"access_token": "acc-1"}))
    _, state = _login(client)

    r = client.get("/api/auth/spotify/callback", {"code": "abc", "state": state})

    assert r.cookies[ACCESS_COOKIE]["max-age"] == 3600
    assert REFRESH_COOKIE not in r.cookies


@pytest.mark.unit
@pytest.mark.parametrize("params, reason", [
    ({"error": "access_denied"}, "access_denied"),
    ({}, "missing_code"),
    ({"code": "abc", "state": "forged"}, "invalid_state"),
])
def test_callback_failures_redirect_home_with_reason(client, spotify_settings, spotify, params, reason):
    _login(client)

    r = client.get("/api/auth/spotify/callback", params)

    assert r.status_code == 302
    assert r["Location"] == f"http://testserver/?spotify_error={reason}"
    assert ACCESS_COOKIE not in r.cookies
    assert spotify.calls == []


@pytest.mark.unit
@pytest.mark.parametrize("failure, reason", [
    (FakeResponse(400, {"error": "invalid_grant"}), "token_exchange_failed"),
    (requests.ConnectionError("down"), "internal_error"),
])
def test_callback_token_exchange_failure(client, spotify_settings, spotify, failure, reason):
    spotify.on("POST", TOKEN_URL, failure)
    _, state = _login(client)

    r = client.get("/api/auth/spotify/callback", {"code": "abc", "state": state})

    assert r["Location"].endswith(f"?spotify_error={reason}")
    assert ACCESS_COOKIE not in r.cookies


@pytest.mark.unit
def test_logout_clears_cookies_and_locks_protected_endpoints(authed_client, spotify):
    spotify.on("GET", "me", FakeResponse(200, {"id": "me"}))
    spotify.on("GET", "me/playlists?limit=50", FakeResponse(200, {"items": [], "next": None}))
    assert authed_client.get("/api/playlists").status_code == 200

    r = authed_client.post("/api/auth/spotify/logout")

    assert r.status_code == 302
    assert r["Location"] == "/"
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        assert r.cookies[name].value == ""
        assert r.cookies[name]["max-age"] == 0

    assert authed_client.get("/api/playlists").status_code == 401
    assert authed_client.get("/api/playlist-tracks", {"playlistId": "p1"}).status_code == 401


@pytest.mark.unit
def test_logout_requires_post(client):
    assert client.get("/api/auth/spotify/logout").status_code == 405


@pytest.mark.unit
def test_undecryptable_cookie_counts_as_missing(client, spotify):
    client.cookies[ACCESS_COOKIE] = "not-a-fernet-token"
    assert client.get("/api/playlists").status_code == 401
    assert spotify.calls == []


@pytest.mark.unit
def test_session_probe(authed_client, client, spotify):
    spotify.on("GET", "me", FakeResponse(200, {"id": "me", "display_name": None, "email": "me@example.com"}))

    assert client.get("/api/session").status_code == 401
    data = authed_client.get("/api/session").json()
    assert data == {"authenticated": True, "spotify_id": "me", "display_name": "me", "email": "me@example.com"}


@pytest.mark.unit
def test_health(client):
    assert client.get("/health").json() == {"ok": True}


@pytest.mark.unit
@pytest.mark.parametrize("failure", [
    FakeResponse(503, text="service unavailable"),
    requests.ConnectionError("offline"),
    FakeResponse(200, text="<html>not json</html>"),
])
def test_session_probe_upstream_failure_is_500_json(authed_client, spotify, failure):
    spotify.on("GET", "me", failure)

    r = authed_client.get("/api/session")

    assert r.status_code == 500
    assert r["Content-Type"] == "application/json"
    assert r.json()["error"] == "Failed to fetch session"


@pytest.mark.unit
def test_session_probe_expired_token_is_401(authed_client, spotify):
    spotify.on("GET", "me", FakeResponse(401, {"error": {"status": 401}}))

    r = authed_client.get("/api/session")

    assert r.status_code == 401
    assert r.json() == {"authenticated": False}
