# cratedigger/digger/models.py
'''
Session-local state types held by the client. Nothing here is persisted.
'''

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

SLOT_COUNT = 6

NONE = "none"
EXISTING = "existing"
NEW = "new"

@dataclass
class Playlist:
    id: str
    name: str
    images: List[Dict[str, Any]] = field(default_factory=list)
    track_total: int = 0
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Playlist":
        return cls(
            id=data["id"],
            name=data["name"],
            images=data.get("images") or [],
            track_total=(data.get("tracks") or {}).get("total", 0),
            owner_id=data.get("ownerId"),
            owner_name=data.get("ownerName"),
        )

@dataclass
class Track:
    id: str
    uri: str
    name: str
    artists: List[str] = field(default_factory=list)
    duration_ms: int = 0
    genres: List[str] = field(default_factory=list)
    preview_url: Optional[str] = None
    album_image_url: Optional[str] = None
    tempo: Optional[float] = None
    tempo_status: str = "idle"  # idle | loading | error

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> Optional["Track"]:
        """
        Build from one playlist-tracks item; None for items without a track (e.g. removed episodes).
        """
        t = item.get("track")
        if not t:
            return None
        images = (t.get("album") or {}).get("images") or []
        return cls(
            id=t["id"],
            uri=t["uri"],
            name=t["name"],
            artists=[a.get("name", "") for a in t.get("artists") or []],
            duration_ms=t.get("duration_ms") or 0,
            genres=item.get("artist_genres") or [],
            preview_url=t.get("preview_url"),
            album_image_url=images[0]["url"] if images else None,
        )

    @property
    def main_artist(self) -> str:
        return self.artists[0] if self.artists else ""

    @property
    def needs_tempo(self) -> bool:
        return self.tempo is None and self.tempo_status == "idle"

    def genre_label(self) -> str:
        if not self.genres:
            return "–"
        main = " · ".join(self.genres[:3])
        if len(self.genres) > 3:
            return f"{main} +{len(self.genres) - 3}"
        return main

@dataclass
class DestinationSlot:
    id: int
    mode: str = NONE
    playlist_id: Optional[str] = None
    display_name: str = ""
    new_name: str = ""
    sent_track_ids: List[str] = field(default_factory=list)

    @property
    def ready(self) -> bool:
        return self.mode == EXISTING and bool(self.playlist_id)

def empty_slots() -> List[DestinationSlot]:
    return [DestinationSlot(id=i + 1) for i in range(SLOT_COUNT)]
