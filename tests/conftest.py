from __future__ import annotations

import os
import random

import pytest

# Keep pygame off real display and audio hardware.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from dino_runner.config import EngineConfig
from dino_runner.engine import SimulationEngine


@pytest.fixture()
def quiet_config() -> EngineConfig:
    """Default geometry with no random spawns."""
    return EngineConfig(spawn_probability=0.0)


@pytest.fixture()
def engine(quiet_config: EngineConfig) -> SimulationEngine:
    return SimulationEngine(quiet_config, rng=random.Random(1234))


@pytest.fixture()
def started(engine: SimulationEngine) -> SimulationEngine:
    engine.start()
    return engine


@pytest.fixture()
def harmless_engine() -> SimulationEngine:
    """Obstacles squeezed into a 1px viewport never reach the player at x=100."""
    cfg = EngineConfig(spawn_probability=0.0, viewport_width=1.0)
    eng = SimulationEngine(cfg, rng=random.Random(99))
    eng.start()
    return eng
