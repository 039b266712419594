# cratedigger/digger/tempo.py
'''
Tempo (BPM) estimation for a preview clip.
Downloads the clip, decodes the first seconds with librosa and runs its beat tracker.
'''

from __future__ import annotations

import logging
import math
import os
import tempfile
import urllib.parse
from typing import Optional

import librosa
import numpy as np
import requests

logger = logging.getLogger(__name__)

SAMPLE_RATE = 22050
MAX_SECONDS = 30
TIMEOUT = 15

def _decode(content: bytes, suffix: str):
    # m4a/mp3 previews need a real file for the audioread fallback
    fd, path = tempfile.mkstemp(suffix=suffix)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(content)
        return librosa.load(path, sr=SAMPLE_RATE, mono=True, duration=MAX_SECONDS)
    finally:
        os.unlink(path)

def detect_tempo(url: str) -> Optional[float]:
    """
    BPM of the clip at `url`, or None when it cannot be fetched, decoded or estimated.
    """
    try:
        r = requests.get(url, timeout=TIMEOUT)
        r.raise_for_status()
        suffix = os.path.splitext(urllib.parse.urlparse(url).path)[1] or ".audio"
        y, sr = _decode(r.content, suffix)
        tempo, _beats = librosa.beat.beat_track(y=y, sr=sr)
        bpm = float(np.atleast_1d(tempo)[0])
    except Exception as exc:
        logger.warning("Tempo detection failed for %s: %s", url, exc)
        return None
    if not math.isfinite(bpm) or bpm <= 0:
        return None
    return bpm
