# cratedigger/digger/previews.py
'''
Preview URL resolution for the client.
 - Spotify's own preview_url wins.
 - Otherwise the iTunes fallback, at most one lookup per MIN_GAP seconds.
 - Results are cached per track id, including "no preview" (None).
'''

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict, Optional

import requests

from .api import ApiError
from .models import Track

logger = logging.getLogger(__name__)

MIN_GAP = 0.3

class PreviewResolver:
    def __init__(
        self,
        lookup: Callable[[str, str], Optional[str]],
        *,
        min_gap: float = MIN_GAP,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._lookup = lookup
        self.min_gap = min_gap
        self._clock = clock
        self._sleep = sleep
        self._last_lookup: Optional[float] = None
        self._pending: Dict[str, "asyncio.Task[Optional[str]]"] = {}
        self.overrides: Dict[str, Optional[str]] = {}

    async def _throttle(self) -> None:
        # reserve the next free slot before sleeping so overlapping lookups queue up
        now = self._clock()
        start = now if self._last_lookup is None else max(now, self._last_lookup + self.min_gap)
        self._last_lookup = start
        if start > now:
            await self._sleep(start - now)

    async def _fetch(self, track: Track) -> Optional[str]:
        try:
            await self._throttle()
            try:
                url = await asyncio.to_thread(self._lookup, track.name, track.main_artist)
            except (ApiError, requests.RequestException) as exc:
                logger.error("Error fetching iTunes preview for %s: %s", track.id, exc)
                url = None
            self.overrides[track.id] = url
            return url
        finally:
            self._pending.pop(track.id, None)

    async def resolve(self, track: Track) -> Optional[str]:
        if track.preview_url:
            return track.preview_url
        if track.id in self.overrides:
            return self.overrides[track.id]

        pending = self._pending.get(track.id)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch(track))
            self._pending[track.id] = pending
        return await asyncio.shield(pending)
