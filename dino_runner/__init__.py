"""Side-scrolling dino runner package."""

from .audio import AudioPlayer, SilentAudio
from .config import AudioConfig, EngineConfig, GameConfig, RenderingConfig, SocketInputConfig
from .engine import GamePhase, Obstacle, PlayerState, Signal, SimulationEngine, Snapshot
from .game import DinoGame, TickDriver
from .input import KeyboardInput, SocketInput

__all__ = [
    "DinoGame",
    "SimulationEngine",
    "Snapshot",
    "GamePhase",
    "Signal",
    "PlayerState",
    "Obstacle",
    "TickDriver",
    "GameConfig",
    "EngineConfig",
    "RenderingConfig",
    "AudioConfig",
    "SocketInputConfig",
    "AudioPlayer",
    "SilentAudio",
    "KeyboardInput",
    "SocketInput",
]
