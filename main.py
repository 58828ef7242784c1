"""Entry point for the dino runner."""

from __future__ import annotations

import argparse
import logging
import random
from dataclasses import replace

from dino_runner import (
    DinoGame,
    GameConfig,
    KeyboardInput,
    SilentAudio,
    SimulationEngine,
    SocketInput,
    SocketInputConfig,
)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the dino runner.")
    parser.add_argument(
        "--seed",
        type=int,
        help="Optional random seed for deterministic obstacle spawns.",
    )
    parser.add_argument(
        "--spawn-probability",
        type=float,
        help="Override the per-tick obstacle spawn probability (default: config value).",
    )
    parser.add_argument(
        "--window-size",
        type=int,
        nargs=2,
        metavar=("WIDTH", "HEIGHT"),
        help="Window size in pixels; the simulated viewport follows the width.",
    )
    parser.add_argument(
        "--stale-collisions",
        action="store_true",
        help="Test collisions against obstacle positions from before each tick's movement.",
    )
    parser.add_argument(
        "--mute",
        action="store_true",
        help="Disable all sound and music.",
    )
    parser.add_argument(
        "--socket-input",
        action="store_true",
        help="Enable JSON-over-TCP control interface for external drivers.",
    )
    parser.add_argument(
        "--socket-host",
        help="Override socket input bind host (default: config value).",
    )
    parser.add_argument(
        "--socket-port",
        type=int,
        help="Override socket input port (default: config value).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> GameConfig:
    config = GameConfig()
    if args.window_size:
        config = GameConfig.for_window(tuple(args.window_size))

    engine_overrides = {}
    if args.spawn_probability is not None:
        engine_overrides["spawn_probability"] = args.spawn_probability
    if args.stale_collisions:
        engine_overrides["collide_before_move"] = True
    if engine_overrides:
        config = replace(config, engine=replace(config.engine, **engine_overrides))

    socket_cfg: SocketInputConfig = config.socket_input
    socket_overrides = {}
    if args.socket_host:
        socket_overrides["host"] = args.socket_host
    if args.socket_port is not None:
        socket_overrides["port"] = args.socket_port
    if socket_overrides:
        socket_cfg = replace(socket_cfg, **socket_overrides)
        config = replace(config, socket_input=socket_cfg)

    if args.mute:
        config = replace(config, audio=replace(config.audio, enabled=False))
    return config


def main(argv=None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = build_config(args)
    rng = random.Random(args.seed)
    engine = SimulationEngine(config.engine, rng=rng)

    input_provider = KeyboardInput()
    if args.socket_input:
        input_provider = SocketInput(base=input_provider, config=config.socket_input)

    audio = SilentAudio() if args.mute else None
    game = DinoGame(config=config, input_provider=input_provider, audio=audio, engine=engine)
    game.run()


if __name__ == "__main__":
    main()
