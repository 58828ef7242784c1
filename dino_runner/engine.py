"""Fixed-step simulation core for the dino runner.

The engine owns every piece of game state and never performs I/O. Callers
drive it with :meth:`SimulationEngine.tick` at a fixed cadence, forward user
commands, and act on the :class:`Signal` values carried by each returned
:class:`Snapshot` (sounds, music).
"""

from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from .config import EngineConfig
from .geometry import Box, percent_to_absolute

logger = logging.getLogger(__name__)


class GamePhase(enum.Enum):
    NOT_STARTED = "not_started"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class Signal(enum.Enum):
    """Side effects the presentation layer should realise."""

    JUMP = "jump"
    GAME_OVER = "game_over"
    MUSIC_ON = "music_on"
    MUSIC_OFF = "music_off"
    MUSIC_RESTART = "music_restart"


@dataclass(frozen=True)
class PlayerState:
    is_jumping: bool = False


@dataclass(frozen=True)
class Obstacle:
    id: int
    x: float  # percent of viewport width


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the engine after a call."""

    phase: GamePhase
    player: PlayerState
    obstacles: tuple[Obstacle, ...]
    score: int
    music_on: bool
    signals: tuple[Signal, ...] = ()
    config: EngineConfig = field(default_factory=EngineConfig, repr=False, compare=False)

    @property
    def player_box(self) -> Box:
        return player_box(self.config, self.player)

    def obstacle_boxes(self) -> list[tuple[Obstacle, Box]]:
        return [(obstacle, obstacle_box(self.config, obstacle)) for obstacle in self.obstacles]


def player_box(config: EngineConfig, player: PlayerState) -> Box:
    bottom = config.jump_height if player.is_jumping else config.ground_height
    return Box(config.player_left, bottom, config.player_width, config.player_height)


def obstacle_box(config: EngineConfig, obstacle: Obstacle) -> Box:
    left = percent_to_absolute(obstacle.x, config.viewport_width)
    return Box(left, config.ground_height, config.obstacle_width, config.obstacle_height)


class SimulationEngine:
    """Owns player, obstacles, score and phase for a single run."""

    def __init__(self, config: Optional[EngineConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.cfg = config or EngineConfig()
        self.rng = rng or random.Random()
        self._phase = GamePhase.NOT_STARTED
        self._player = PlayerState()
        self._obstacles: list[Obstacle] = []
        self._score = 0
        self._music_on = False
        self._jump_elapsed_ms: Optional[float] = None  # None while the jump timer is disarmed
        self._next_id = 1
        self._tick_count = 0

    @property
    def config(self) -> EngineConfig:
        return self.cfg

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def player(self) -> PlayerState:
        return self._player

    @property
    def obstacles(self) -> tuple[Obstacle, ...]:
        return tuple(self._obstacles)

    @property
    def score(self) -> int:
        return self._score

    @property
    def music_on(self) -> bool:
        return self._music_on

    @property
    def tick_count(self) -> int:
        """Ticks applied since the last start or restart."""
        return self._tick_count

    def snapshot(self, signals: tuple[Signal, ...] = ()) -> Snapshot:
        return Snapshot(
            phase=self._phase,
            player=self._player,
            obstacles=tuple(self._obstacles),
            score=self._score,
            music_on=self._music_on,
            signals=signals,
            config=self.cfg,
        )

    # ------------------------------------------------------------------ commands

    def start(self) -> Snapshot:
        if self._phase is not GamePhase.NOT_STARTED:
            logger.debug("start ignored in phase %s", self._phase.value)
            return self.snapshot()
        self._phase = GamePhase.PLAYING
        self._music_on = True
        self._tick_count = 0
        logger.info("Run started")
        return self.snapshot((Signal.MUSIC_ON,))

    def request_jump(self) -> Snapshot:
        if self._phase is not GamePhase.PLAYING or self._player.is_jumping:
            logger.debug("jump ignored (phase=%s, jumping=%s)", self._phase.value, self._player.is_jumping)
            return self.snapshot()
        self._player = PlayerState(is_jumping=True)
        self._jump_elapsed_ms = 0.0
        return self.snapshot((Signal.JUMP,))

    def restart(self) -> Snapshot:
        if self._phase is not GamePhase.GAME_OVER:
            logger.debug("restart ignored in phase %s", self._phase.value)
            return self.snapshot()
        self._obstacles = []
        self._score = 0
        self._player = PlayerState()
        self._jump_elapsed_ms = None
        self._tick_count = 0
        self._phase = GamePhase.PLAYING
        self._music_on = True
        logger.info("Run restarted")
        return self.snapshot((Signal.MUSIC_RESTART,))

    def toggle_music(self) -> Snapshot:
        self._music_on = not self._music_on
        return self.snapshot((Signal.MUSIC_ON if self._music_on else Signal.MUSIC_OFF,))

    def spawn_obstacle(self, x: Optional[float] = None) -> Optional[Obstacle]:
        """Append an obstacle immediately; ignored unless a run is in progress."""
        if self._phase is not GamePhase.PLAYING:
            logger.debug("spawn ignored in phase %s", self._phase.value)
            return None
        obstacle = Obstacle(id=self._next_id, x=self.cfg.spawn_x if x is None else float(x))
        self._next_id += 1
        self._obstacles.append(obstacle)
        return obstacle

    # ---------------------------------------------------------------- simulation

    def tick(self, dt_ms: Optional[float] = None) -> Snapshot:
        """Advance the run by one fixed step.

        A missing or non-positive ``dt_ms`` counts as one ``tick_ms`` step so the
        jump timer always moves forward.
        """
        if self._phase is not GamePhase.PLAYING:
            return self.snapshot()

        cfg = self.cfg
        step_ms = cfg.tick_ms if dt_ms is None or dt_ms <= 0 else dt_ms
        self._tick_count += 1

        if self._jump_elapsed_ms is not None:
            if self._jump_elapsed_ms >= cfg.jump_ms:
                self._player = PlayerState(is_jumping=False)
                self._jump_elapsed_ms = None
            else:
                self._jump_elapsed_ms += step_ms

        stale = tuple(self._obstacles)

        moved = [Obstacle(id=obs.id, x=obs.x - cfg.obstacle_speed) for obs in self._obstacles]
        self._obstacles = [obs for obs in moved if obs.x > cfg.cull_threshold]

        if cfg.spawn_probability > 0 and self.rng.random() < cfg.spawn_probability:
            self.spawn_obstacle()

        candidates = stale if cfg.collide_before_move else self._obstacles
        if self._collides(candidates):
            signals = [Signal.GAME_OVER]
            if self._music_on:
                self._music_on = False
                signals.insert(0, Signal.MUSIC_OFF)
            self._phase = GamePhase.GAME_OVER
            logger.info("Collision after %d ticks, final score %d", self._tick_count, self._score)
            return self.snapshot(tuple(signals))

        self._score += 1
        return self.snapshot()

    def _collides(self, obstacles) -> bool:
        hero = player_box(self.cfg, self._player)
        return any(hero.overlaps(obstacle_box(self.cfg, obs)) for obs in obstacles)
