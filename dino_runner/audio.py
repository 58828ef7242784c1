"""Plays sounds and music in response to engine signals."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Protocol

import pygame

from .config import AudioConfig
from .engine import Signal

logger = logging.getLogger(__name__)


class AudioSink(Protocol):
    def handle(self, signals: Iterable[Signal]) -> None:
        ...

    def shutdown(self) -> None:
        ...


class SilentAudio:
    """Accepts signals and ignores them."""

    def handle(self, signals: Iterable[Signal]) -> None:
        pass

    def shutdown(self) -> None:
        pass


class AudioPlayer:
    """pygame.mixer backed effect realiser.

    Missing files or an unavailable mixer leave the matching cue silent.
    """

    def __init__(self, config: Optional[AudioConfig] = None, mixer=None) -> None:
        self.cfg = config or AudioConfig()
        self.mixer = mixer or pygame.mixer
        self.available = self._init_mixer()
        self.jump_sound = self._load_sound(self.cfg.jump_sound)
        self.game_over_sound = self._load_sound(self.cfg.game_over_sound)
        self.music_loaded = self._load_music(self.cfg.music)
        self._music_started = False

    def _init_mixer(self) -> bool:
        if not self.cfg.enabled:
            return False
        try:
            if not self.mixer.get_init():
                self.mixer.init()
        except pygame.error as exc:
            logger.warning("Audio disabled, mixer unavailable: %s", exc)
            return False
        return True

    def _asset(self, filename: str) -> Optional[Path]:
        path = Path(self.cfg.asset_dir) / filename
        if not path.exists():
            logger.warning("Sound asset not found at %s", path)
            return None
        return path

    def _load_sound(self, filename: str):
        if not self.available:
            return None
        path = self._asset(filename)
        if path is None:
            return None
        try:
            sound = self.mixer.Sound(str(path))
        except pygame.error as exc:
            logger.warning("Unable to load sound %s: %s", path, exc)
            return None
        sound.set_volume(self.cfg.effects_volume)
        return sound

    def _load_music(self, filename: str) -> bool:
        if not self.available:
            return False
        path = self._asset(filename)
        if path is None:
            return False
        try:
            self.mixer.music.load(str(path))
        except pygame.error as exc:
            logger.warning("Unable to load music %s: %s", path, exc)
            return False
        self.mixer.music.set_volume(self.cfg.music_volume)
        return True

    def handle(self, signals: Iterable[Signal]) -> None:
        for signal in signals:
            if signal is Signal.JUMP:
                self._play_effect(self.jump_sound)
            elif signal is Signal.GAME_OVER:
                self._play_effect(self.game_over_sound)
            elif signal is Signal.MUSIC_ON:
                self._resume_music()
            elif signal is Signal.MUSIC_OFF:
                if self.music_loaded:
                    self.mixer.music.pause()
            elif signal is Signal.MUSIC_RESTART:
                self._restart_music()

    def _play_effect(self, sound) -> None:
        if sound is None:
            return
        # Rewind so rapid repeats are not swallowed.
        sound.stop()
        sound.play()

    def _resume_music(self) -> None:
        if not self.music_loaded:
            return
        if self._music_started:
            self.mixer.music.unpause()
        else:
            self._restart_music()

    def _restart_music(self) -> None:
        if not self.music_loaded:
            return
        self.mixer.music.play(loops=-1)
        self._music_started = True

    def shutdown(self) -> None:
        if not self.available:
            return
        if self.music_loaded:
            self.mixer.music.stop()
        for sound in (self.jump_sound, self.game_over_sound):
            if sound is not None:
                sound.stop()
