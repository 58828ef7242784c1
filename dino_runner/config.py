"""Configuration data structures for the dino runner."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from pathlib import Path


@dataclass(frozen=True)
class EngineConfig:
    """Tunable simulation parameters.

    Horizontal obstacle positions are percentages of the viewport width; every
    other length is in screen pixels measured from the bottom of the window.
    """

    tick_ms: float = 50.0
    jump_ms: float = 600.0
    obstacle_speed: float = 2.0  # percent of viewport per tick
    spawn_probability: float = 0.02  # per tick
    spawn_x: float = 100.0
    cull_threshold: float = -50.0
    player_left: float = 100.0
    player_width: float = 40.0
    player_height: float = 60.0
    ground_height: float = 100.0  # player bottom while grounded
    jump_height: float = 200.0  # player bottom while jumping
    obstacle_width: float = 40.0
    obstacle_height: float = 60.0
    viewport_width: float = 1280.0
    collide_before_move: bool = False

    def __post_init__(self) -> None:
        for name in (
            "tick_ms",
            "jump_ms",
            "player_width",
            "player_height",
            "obstacle_width",
            "obstacle_height",
            "viewport_width",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")
        if not 0.0 <= self.spawn_probability <= 1.0:
            raise ValueError(f"spawn_probability must be within [0, 1], got {self.spawn_probability!r}")
        if self.obstacle_speed < 0:
            raise ValueError(f"obstacle_speed must not be negative, got {self.obstacle_speed!r}")
        if self.cull_threshold >= self.spawn_x:
            raise ValueError("cull_threshold must lie left of spawn_x")

    @property
    def jump_ticks(self) -> int:
        """Number of ticks a jump keeps the player elevated."""
        return math.ceil(self.jump_ms / self.tick_ms)


@dataclass(frozen=True)
class RenderingConfig:
    """Visual parameters for the pygame renderer."""

    sky_top_color: tuple[int, int, int] = (186, 230, 253)
    sky_bottom_color: tuple[int, int, int] = (187, 247, 208)
    ground_color: tuple[int, int, int] = (34, 197, 94)
    player_color: tuple[int, int, int] = (239, 68, 68)
    obstacle_color: tuple[int, int, int] = (22, 101, 52)
    ui_color: tuple[int, int, int] = (17, 24, 39)
    hint_color: tuple[int, int, int] = (55, 65, 81)
    panel_color: tuple[int, int, int] = (255, 255, 255)
    button_color: tuple[int, int, int] = (59, 130, 246)
    button_text_color: tuple[int, int, int] = (255, 255, 255)
    overlay_alpha: int = 128
    corner_radius: int = 6
    score_font_size: int = 30
    title_font_size: int = 40
    body_font_size: int = 22
    hint_font_size: int = 18
    jump_transition_ms: float = 200.0  # easing of the drawn player bottom


@dataclass(frozen=True)
class AudioConfig:
    """Sound assets and volumes."""

    enabled: bool = True
    asset_dir: Path = Path(__file__).resolve().parent.parent / "assets"
    jump_sound: str = "jump.wav"
    music: str = "music.mp3"
    game_over_sound: str = "gameOver.wav"
    effects_volume: float = 0.8
    music_volume: float = 0.5


@dataclass(frozen=True)
class SocketInputConfig:
    """JSON-over-TCP control interface for external drivers."""

    host: str = "127.0.0.1"
    port: int = 5055
    backlog: int = 1
    read_timeout: float = 0.5
    max_queued_commands: int = 32
    max_line_bytes: int = 4096


@dataclass(frozen=True)
class GameConfig:
    """High-level configuration of the game."""

    window_size: tuple[int, int] = (1280, 720)
    target_fps: int = 60
    title: str = "Dino Game"
    engine: EngineConfig = field(default_factory=EngineConfig)
    render: RenderingConfig = field(default_factory=RenderingConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    socket_input: SocketInputConfig = field(default_factory=SocketInputConfig)

    @classmethod
    def for_window(cls, window_size: tuple[int, int], **overrides) -> "GameConfig":
        """Build a config whose engine viewport matches the window width."""
        config = cls(window_size=window_size, **overrides)
        return replace(config, engine=replace(config.engine, viewport_width=float(window_size[0])))
