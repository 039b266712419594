import pytest
import requests

from cratedigger.services import tracks as svc
from tests.support.fakes import FakeResponse, track_item

PAGE_1 = "playlists/pl1/tracks?limit=100"
PAGE_2 = "https://api.spotify.com/v1/playlists/pl1/tracks?offset=100&limit=100"
PAGE_3 = "https://api.spotify.com/v1/playlists/pl1/tracks?offset=200&limit=100"


def _page(items, next_url=None, offset=0, total=None):
    return FakeResponse(200, {
        "href": "https://api.spotify.com/v1/playlists/pl1/tracks",
        "items": items,
        "limit": 100,
        "next": next_url,
        "offset": offset,
        "previous": None,
        "total": total if total is not None else len(items),
    })


def _artists(*artists):
    return FakeResponse(200, {"artists": [{"id": aid, "genres": g} for aid, g in artists]})


@pytest.mark.unit
def test_requires_auth_cookie(client, spotify):
    r = client.get("/api/playlist-tracks", {"playlistId": "pl1"})
    assert r.status_code == 401
    assert spotify.calls == []


@pytest.mark.unit
def test_missing_playlist_id_is_400(authed_client, spotify):
    r = authed_client.get("/api/playlist-tracks")
    assert r.status_code == 400
    assert spotify.calls == []


@pytest.mark.unit
def test_all_pages_concatenated_once_in_upstream_order(authed_client, spotify):
    spotify.on("GET", PAGE_1, _page([track_item("t1", artists=[("a1", "A")]), track_item("t2")], PAGE_2, total=5))
    spotify.on("GET", PAGE_2, _page([track_item("t3"), track_item("t4")], PAGE_3, offset=100))
    spotify.on("GET", PAGE_3, _page([track_item("t5")], None, offset=200))
    spotify.on("GET", "artists", _artists(("a1", ["house"])))

    r = authed_client.get("/api/playlist-tracks", {"playlistId": "pl1"})

    assert r.status_code == 200
    data = r.json()
    assert [it["track"]["id"] for it in data["items"]] == ["t1", "t2", "t3", "t4", "t5"]
    # envelope comes from the first page
    assert data["total"] == 5
    assert data["offset"] == 0
    assert len(spotify.calls_to("GET", PAGE_1)) == 1
    assert len(spotify.calls_to("GET", PAGE_3)) == 1


@pytest.mark.unit
def test_shared_artist_genres_propagate_as_deduplicated_union(authed_client, spotify):
    items = [
        track_item("t1", artists=[("a1", "A"), ("a2", "B")]),
        track_item("t2", artists=[("a1", "A")]),
        track_item("t3", artists=[("a2", "B"), ("a1", "A")]),
    ]
    spotify.on("GET", PAGE_1, _page(items))
    spotify.on("GET", "artists", _artists(("a1", ["techno", "house"]), ("a2", ["house", "disco"])))

    data = authed_client.get("/api/playlist-tracks", {"playlistId": "pl1"}).json()
    by_id = {it["track"]["id"]: it["artist_genres"] for it in data["items"]}

    assert by_id["t1"] == ["techno", "house", "disco"]
    assert by_id["t2"] == ["techno", "house"]
    assert set(by_id["t3"]) == {"techno", "house", "disco"}
    assert len(by_id["t3"]) == 3


@pytest.mark.unit
def test_artist_lookups_are_chunked_by_fifty(authed_client, spotify):
    items = [track_item(f"t{i}", artists=[(f"a{i}", f"Artist {i}")]) for i in range(120)]
    spotify.on("GET", PAGE_1, _page(items))
    spotify.on("GET", "artists", _artists())

    r = authed_client.get("/api/playlist-tracks", {"playlistId": "pl1"})

    assert r.status_code == 200
    sizes = [len(c[2]["params"]["ids"].split(",")) for c in spotify.calls_to("GET", "artists")]
    assert sizes == [50, 50, 20]


@pytest.mark.unit
def test_items_without_track_or_artists_are_left_alone(authed_client, spotify):
    items = [{"track": None}, track_item("t1"), track_item("t2", artists=[("a1", "A")])]
    spotify.on("GET", PAGE_1, _page(items))
    spotify.on("GET", "artists", _artists(("a1", ["ambient"])))

    data = authed_client.get("/api/playlist-tracks", {"playlistId": "pl1"}).json()

    assert data["items"][0] == {"track": None}
    assert "artist_genres" not in data["items"][1]
    assert data["items"][2]["artist_genres"] == ["ambient"]


@pytest.mark.unit
@pytest.mark.parametrize("failure", [
    FakeResponse(502, text="bad gateway"),
    requests.ConnectionError("boom"),
])
def test_enrichment_failure_returns_tracks_without_genres(authed_client, spotify, failure):
    spotify.on("GET", PAGE_1, _page([track_item("t1", artists=[("a1", "A")])]))
    spotify.on("GET", "artists", failure)

    r = authed_client.get("/api/playlist-tracks", {"playlistId": "pl1"})

    assert r.status_code == 200
    items = r.json()["items"]
    assert [it["track"]["id"] for it in items] == ["t1"]
    assert "artist_genres" not in items[0]


@pytest.mark.unit
def test_pagination_failure_fails_whole_request(authed_client, spotify):
    spotify.on("GET", PAGE_1, _page([track_item("t1")], PAGE_2))
    spotify.on("GET", PAGE_2, FakeResponse(500, text="oops"))

    r = authed_client.get("/api/playlist-tracks", {"playlistId": "pl1"})

    assert r.status_code == 500
    assert r.json()["error"] == "Failed to fetch tracks"
    assert spotify.calls_to("GET", "artists") == []


@pytest.mark.unit
def test_upstream_unauthorized_is_401(authed_client, spotify):
    spotify.on("GET", PAGE_1, FakeResponse(401, {"error": {"status": 401}}))

    r = authed_client.get("/api/playlist-tracks", {"playlistId": "pl1"})

    assert r.status_code == 401


@pytest.mark.unit
def test_empty_playlist_gets_empty_envelope(spotify):
    spotify.on("GET", PAGE_1, _page([]))

    data = svc.playlist_tracks("tok", "pl1")

    assert data["items"] == []
    assert spotify.calls_to("GET", "artists") == []
