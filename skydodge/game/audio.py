# skydodge/game/audio.py
"""Background track as a session listener, played through pygame.mixer."""
from __future__ import annotations
import logging
import os
from typing import Optional

import pygame

logger = logging.getLogger(__name__)

DEFAULT_TRACK = os.path.join(os.path.dirname(os.path.abspath(__file__)), "assets", "bg.ogg")


class BackgroundMusic:
    """
    Looping background track tied to the game lifecycle:
    - start: waits for the first key press (unlock()), then loops
    - game over: pause
    - reset: rewind and play
    Without a mixer or a track file every call is a no-op.
    """
    def __init__(self, track: Optional[str] = DEFAULT_TRACK, volume: float = 0.7, enabled: bool = True):
        self.enabled = enabled
        self.available = False
        self.unlocked = False
        self._wanted = False
        self._loaded = False
        self.track = track

        if not enabled or not track:
            return
        if not os.path.exists(track):
            logger.info("no background track at %s", track)
            return
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=44100, size=-16, channels=2, buffer=512)
            pygame.mixer.music.load(track)
            pygame.mixer.music.set_volume(volume)
            self.available = True
        except pygame.error as e:
            logger.warning("background music disabled: %s", e)

    def unlock(self):
        """First user input; music may start from now on."""
        if self.unlocked:
            return
        self.unlocked = True
        if self._wanted:
            self._play(rewind=True)

    def _play(self, rewind: bool):
        if not (self.available and self.unlocked):
            return
        if rewind or not self._loaded:
            pygame.mixer.music.play(-1)
            self._loaded = True
        else:
            pygame.mixer.music.unpause()

    # --- session listener hooks ---
    def on_game_start(self):
        self._wanted = True
        self._play(rewind=False)

    def on_reset(self):
        self._wanted = True
        self._play(rewind=True)

    def on_game_over(self, score: int):
        self._wanted = False
        if self.available and self._loaded:
            pygame.mixer.music.pause()

    def close(self):
        if self.available:
            pygame.mixer.music.stop()
