# cratedigger/clients/itunes.py
'''
Client layer for the public iTunes Search API (no authentication).
Used only to find a fallback 30s preview clip for tracks Spotify has none for.
'''

import requests

SEARCH_URL = "https://itunes.apple.com/search"

TIMEOUT = 10

def search_songs(term: str, *, limit: int = 1, timeout=TIMEOUT):
    return requests.get(
        SEARCH_URL,
        params={"term": term, "media": "music", "entity": "song", "limit": str(limit)},
        timeout=timeout,
    )
