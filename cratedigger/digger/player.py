# cratedigger/digger/player.py
'''
Single-flight preview playback.
 - AudioDeck: the one audio element. Loading a new source always unloads the old one first.
 - PreviewPlayer: starts/stops previews, guarded by a generation counter. Every attempt remembers the
   generation it started with and gives up at each suspension point once a newer attempt exists,
   so only the latest attempt can ever mark a track as playing.
'''

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from .models import Track
from .previews import PreviewResolver

logger = logging.getLogger(__name__)

SEEK_END_MARGIN = 0.2

class AudioError(Exception):
    pass

class PlaybackAborted(AudioError):
    """The source was replaced or unloaded while playback was starting."""

class AudioDeck:
    def __init__(
        self,
        output: Optional[Callable[[str], Awaitable[Optional[float]]]] = None,
        stop: Optional[Callable[[str], None]] = None,
    ):
        # output(url) starts the actual sound and returns the clip duration if known;
        # stop(url) silences whatever output(url) started
        self._output = output
        self._stop = stop
        self.src: Optional[str] = None
        self.loop = False
        self.position = 0.0
        self.duration: Optional[float] = None
        self.paused = True

    def _silence(self, src: Optional[str]) -> None:
        if src and self._stop is not None:
            self._stop(src)

    def unload(self) -> None:
        src = self.src
        self.paused = True
        self.position = 0.0
        self.loop = False
        self.src = None
        self.duration = None
        self._silence(src)

    def load(self, url: str, *, loop: bool = True) -> None:
        self.src = url
        self.position = 0.0
        self.loop = loop

    async def play(self) -> None:
        src = self.src
        if not src:
            raise AudioError("nothing loaded")
        duration = None
        if self._output is not None:
            duration = await self._output(src)
        if self.src != src:
            # replaced while starting; the sound output(src) began must not linger
            self._silence(src)
            raise PlaybackAborted(src)
        self.duration = duration
        self.paused = False

    def seek(self, delta: float) -> float:
        position = max(0.0, self.position + delta)
        if self.duration and self.duration > 0:
            position = min(self.duration - SEEK_END_MARGIN, position)
        self.position = position
        return position

class PreviewPlayer:
    def __init__(
        self,
        resolver: PreviewResolver,
        deck: Optional[AudioDeck] = None,
        *,
        on_url: Optional[Callable[[Track, str], None]] = None,
    ):
        self.resolver = resolver
        self.deck = deck or AudioDeck()
        self.on_url = on_url
        self.generation = 0
        self.playing_track_id: Optional[str] = None
        self.follow_playback = False

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def stop(self) -> None:
        self.generation += 1
        self.follow_playback = False
        self.deck.unload()
        self.playing_track_id = None

    async def toggle(self, track: Track) -> bool:
        """
        Stop `track` if it is playing, otherwise switch playback to it.
        Returns True only if this call ended up starting playback.
        """
        if self.playing_track_id == track.id:
            self.stop()
            return False

        if self.playing_track_id is not None:
            self.generation += 1
            self.deck.unload()
            self.playing_track_id = None

        self.generation += 1
        mine = self.generation

        url = await self.resolver.resolve(track)
        if not url:
            if self.is_current(mine):
                self.follow_playback = False
            return False

        if self.on_url is not None:
            self.on_url(track, url)

        if not self.is_current(mine):
            return False

        self.follow_playback = True
        self.deck.unload()
        self.deck.load(url, loop=True)

        try:
            await self.deck.play()
        except PlaybackAborted:
            return False
        except AudioError as exc:
            logger.error("Audio play error for %s: %s", track.id, exc)
            if self.is_current(mine):
                self.follow_playback = False
            return False

        if not self.is_current(mine):
            return False
        self.playing_track_id = track.id
        return True
