# cratedigger/digger/__init__.py
"""
Headless client for the Crate Digger web service.
"""

from .api import ApiError, CrateApi, NotAuthenticated
from .crate import Crate
from .models import DestinationSlot, Playlist, Track
from .player import AudioDeck, PreviewPlayer
from .previews import PreviewResolver

__all__ = [
    "ApiError", "AudioDeck", "Crate", "CrateApi", "DestinationSlot", "NotAuthenticated",
    "Playlist", "PreviewPlayer", "PreviewResolver", "Track",
]
