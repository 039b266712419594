# cratedigger/digger/crate.py
'''
Client-side session state for digging through one playlist at a time.
 - Holds the playlists, the open (source) playlist, its tracks and the selection.
 - Owns the six destination slots and the session-local "already sent" bookkeeping.
 - Drives the preview player and background tempo detection.
 - Maps single keys to actions (1-6, arrows, space) the way the web UI does.
All network calls go through CrateApi in a worker thread, so the event loop only
suspends at network calls, the preview throttle, tempo decoding and playback start.
'''

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

import requests

from .api import ApiError, CrateApi, NotAuthenticated
from .models import (
    EXISTING, NEW, NONE,
    DestinationSlot, Playlist, Track, empty_slots,
)
from .player import AudioDeck, PreviewPlayer
from .previews import PreviewResolver
from .tempo import detect_tempo

logger = logging.getLogger(__name__)

NEW_PLAYLIST_OPTION = "__new__"
SEEK_STEP = 2.0

# send_to_destination outcomes
ADDED = "added"
DUPLICATE = "duplicate"
NO_PLAYLIST = "no-playlist"
SAME_PLAYLIST = "same-playlist"
ALREADY_SENT = "already-sent"
NO_TRACK_ID = "no-track-id"
FAILED = "failed"

_API_ERRORS = (ApiError, requests.RequestException)

class Crate:
    def __init__(
        self,
        api: CrateApi,
        *,
        deck: Optional[AudioDeck] = None,
        resolver: Optional[PreviewResolver] = None,
        tempo_detector: Callable[[str], Optional[float]] = detect_tempo,
    ):
        self.api = api
        self.playlists: List[Playlist] = []
        self.current_user_id: Optional[str] = None
        self.auth_error = False

        self.selected_playlist_id: Optional[str] = None
        self.selected_playlist_name: Optional[str] = None
        self.tracks: List[Track] = []
        self.loading_tracks = False
        self.selected_track_id: Optional[str] = None

        self.destinations: List[DestinationSlot] = empty_slots()
        self.auto_remove_on_send = False

        self.resolver = resolver or PreviewResolver(api.itunes_preview)
        self.player = PreviewPlayer(self.resolver, deck, on_url=self._schedule_tempo)
        self._detect_tempo = tempo_detector
        self._tempo_tasks: set = set()

    # ---- lookups ------------------------------------------------------------

    @property
    def playing_track_id(self) -> Optional[str]:
        return self.player.playing_track_id

    def find_track(self, track_id: Optional[str]) -> Optional[Track]:
        # local files have no id, so None never identifies a track
        if not track_id:
            return None
        return next((t for t in self.tracks if t.id == track_id), None)

    def index_of(self, track_id: Optional[str]) -> int:
        if not track_id:
            return -1
        return next((i for i, t in enumerate(self.tracks) if t.id == track_id), -1)

    def active_track(self) -> Optional[Track]:
        """The selected track, else the playing one."""
        return self.find_track(self.selected_track_id or self.playing_track_id)

    def slot(self, slot_id: int) -> Optional[DestinationSlot]:
        return next((s for s in self.destinations if s.id == slot_id), None)

    def source_owned(self) -> bool:
        if not self.selected_playlist_id or not self.current_user_id:
            return False
        return any(
            pl.id == self.selected_playlist_id and pl.owner_id == self.current_user_id
            for pl in self.playlists
        )

    async def _call(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except NotAuthenticated:
            self.auth_error = True
            raise

    # ---- playlists ----------------------------------------------------------

    async def load_playlists(self) -> bool:
        try:
            data = await self._call(self.api.playlists)
        except _API_ERRORS as exc:
            logger.error("Failed to load playlists: %s", exc)
            return False
        self.playlists = [Playlist.from_api(p) for p in data.get("items") or []]
        self.current_user_id = data.get("currentUserId")
        return True

    async def select_playlist(self, playlist_id: str) -> bool:
        pl = next((p for p in self.playlists if p.id == playlist_id), None)
        self.selected_playlist_id = playlist_id
        self.selected_playlist_name = pl.name if pl else None
        self.tracks = []
        self.loading_tracks = True
        self.selected_track_id = None
        self.player.stop()

        try:
            data = await self._call(self.api.playlist_tracks, playlist_id)
        except _API_ERRORS as exc:
            logger.error("Failed to load tracks for %s: %s", playlist_id, exc)
            if self.selected_playlist_id == playlist_id:
                self.loading_tracks = False
            return False

        if self.selected_playlist_id != playlist_id:
            return False
        self.tracks = [t for t in map(Track.from_item, data.get("items") or []) if t]
        self.loading_tracks = False
        return True

    # ---- previews + tempo ---------------------------------------------------

    async def preview(self, track: Track) -> bool:
        if self.player.playing_track_id != track.id:
            self.selected_track_id = track.id
        return await self.player.toggle(track)

    def _schedule_tempo(self, track: Track, url: str) -> None:
        if not track.needs_tempo:
            return
        track.tempo_status = "loading"
        task = asyncio.get_running_loop().create_task(self._tempo_for(track, url))
        self._tempo_tasks.add(task)
        task.add_done_callback(self._tempo_tasks.discard)

    async def _tempo_for(self, track: Track, url: str) -> None:
        bpm = await asyncio.to_thread(self._detect_tempo, url)
        track.tempo = bpm
        track.tempo_status = "error" if bpm is None else "idle"

    async def settle(self) -> None:
        """Wait for any tempo detection still running."""
        if self._tempo_tasks:
            await asyncio.gather(*list(self._tempo_tasks))

    def seek(self, delta: float) -> Optional[float]:
        if not self.playing_track_id:
            return None
        return self.player.deck.seek(delta)

    # ---- destination slots --------------------------------------------------

    def configure_slot(self, slot_id: int, value: str) -> None:
        """
        "" clears the slot, "__new__" prepares a new playlist, anything else targets that playlist id.
        """
        slot = self.slot(slot_id)
        if slot is None:
            return
        if value == "":
            slot.mode = NONE
            slot.playlist_id = None
            slot.display_name = ""
            slot.new_name = ""
            slot.sent_track_ids = []
        elif value == NEW_PLAYLIST_OPTION:
            slot.mode = NEW
            slot.playlist_id = None
            slot.display_name = slot.new_name or ""
            slot.sent_track_ids = []
        else:
            pl = next((p for p in self.playlists if p.id == value), None)
            if value != slot.playlist_id:
                slot.sent_track_ids = []
            slot.mode = EXISTING
            slot.playlist_id = value
            slot.display_name = pl.name if pl else value
            slot.new_name = ""

    def set_new_name(self, slot_id: int, name: str) -> None:
        slot = self.slot(slot_id)
        if slot is None:
            return
        slot.mode = NEW
        slot.playlist_id = None
        slot.new_name = name
        slot.display_name = name.strip()

    async def create_playlist_for_slot(self, slot_id: int) -> Optional[Playlist]:
        slot = self.slot(slot_id)
        if slot is None:
            return None
        name = (slot.new_name or slot.display_name).strip()
        if not name:
            logger.info("Slot %s: type a playlist name before creating", slot_id)
            return None

        try:
            data = await self._call(self.api.create_playlist, name)
        except _API_ERRORS as exc:
            logger.error("Failed to create playlist for slot %s: %s", slot_id, exc)
            return None

        created = Playlist.from_api(data)
        if not any(p.id == created.id for p in self.playlists):
            self.playlists.insert(0, created)
        slot.mode = EXISTING
        slot.playlist_id = created.id
        slot.display_name = created.name
        slot.new_name = ""
        return created

    async def send_to_destination(self, slot_id: int, track: Track) -> str:
        slot = self.slot(slot_id)
        if slot is None or not slot.ready:
            logger.info("Slot %s has no playlist yet", slot_id)
            return NO_PLAYLIST
        if self.selected_playlist_id and slot.playlist_id == self.selected_playlist_id:
            logger.info("Slot %s: source and destination playlist are the same, skipping", slot_id)
            return SAME_PLAYLIST
        if not track.id:
            logger.info("Track %r has no Spotify id, not sending", track.name)
            return NO_TRACK_ID
        if track.id in slot.sent_track_ids:
            logger.info("Track %r already sent to slot %s this session", track.name, slot_id)
            return ALREADY_SENT

        # the source may change while the add is in flight
        source_id = self.selected_playlist_id
        source_owned = self.source_owned()
        neighbour = self._neighbour_of(track)

        # claimed up front so a second send while this one is in flight is a no-op
        slot.sent_track_ids.append(track.id)
        try:
            data = await self._call(self.api.destination_add, slot.playlist_id, track.uri)
        except _API_ERRORS as exc:
            logger.error("Failed to add %s to slot %s: %s", track.id, slot_id, exc)
            if track.id in slot.sent_track_ids:
                slot.sent_track_ids.remove(track.id)
            return FAILED

        if data.get("added"):
            outcome = ADDED
            logger.info("Track %r added to playlist %s", track.name, data.get("playlistId"))
        else:
            outcome = data.get("reason") or DUPLICATE
            logger.info("Track %r is already in playlist %s", track.name, slot.playlist_id)

        if self.auto_remove_on_send and source_id:
            await self._remove_from_source(track, source_id, source_owned, neighbour)
        return outcome

    def _neighbour_of(self, track: Track) -> Optional[Track]:
        """The track that takes over once `track` leaves the list: the next one, else the previous."""
        index = self.index_of(track.id)
        if index == -1:
            return None
        if index + 1 < len(self.tracks):
            return self.tracks[index + 1]
        if index > 0:
            return self.tracks[index - 1]
        return None

    async def _remove_from_source(
        self,
        track: Track,
        source_id: str,
        owned: bool,
        next_track: Optional[Track],
    ) -> None:
        if owned:
            try:
                await self._call(self.api.remove_from_playlist, source_id, track.uri)
            except _API_ERRORS as exc:
                logger.error("Failed to remove %s from source playlist: %s", track.id, exc)
                return

        if self.selected_playlist_id != source_id:
            return

        self.tracks = [t for t in self.tracks if t.id != track.id]
        if next_track is not None:
            self.selected_track_id = next_track.id
            await self.preview(next_track)
            return
        if self.selected_track_id == track.id:
            self.selected_track_id = None
        if self.playing_track_id == track.id:
            self.player.stop()

    # ---- keyboard -----------------------------------------------------------

    async def move_selection(self, direction: int, should_play: bool) -> None:
        if not self.tracks:
            return
        index = self.index_of(self.selected_track_id) if self.selected_track_id else -1
        if index == -1:
            if direction == 1:
                self.selected_track_id = self.tracks[0].id
            return
        new_index = index + direction
        if new_index < 0 or new_index >= len(self.tracks):
            return
        new_track = self.tracks[new_index]
        self.selected_track_id = new_track.id
        if should_play:
            await self.preview(new_track)

    async def handle_key(self, key: str) -> bool:
        """
        Returns True when the key was consumed.
        """
        if len(key) == 1 and key in "123456":
            track = self.find_track(self.selected_track_id)
            if track is None:
                return False
            await self.send_to_destination(int(key), track)
            return True

        if key == "ArrowDown":
            if not self.tracks:
                return False
            follow = self.player.follow_playback if self.selected_track_id else False
            await self.move_selection(1, follow)
            return True

        if key == "ArrowUp":
            if not self.tracks or not self.selected_track_id:
                return False
            await self.move_selection(-1, self.player.follow_playback)
            return True

        if key in (" ", "Spacebar"):
            track = self.active_track()
            if track is None:
                return False
            await self.preview(track)
            return True

        if key == "ArrowLeft":
            return self.seek(-SEEK_STEP) is not None

        if key == "ArrowRight":
            return self.seek(SEEK_STEP) is not None

        return False
