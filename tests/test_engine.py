from __future__ import annotations

import random

import pytest

from dino_runner.config import EngineConfig
from dino_runner.engine import GamePhase, Obstacle, PlayerState, Signal, SimulationEngine

# With the default 1280px viewport an obstacle overlaps the grounded player
# while 4.6875 < x < 10.9375. REACHES_PLAYER_X only overlaps after one move.
OVERLAPPING_X = 10.0
REACHES_PLAYER_X = 12.0


def _crash(engine: SimulationEngine) -> None:
    engine.spawn_obstacle(OVERLAPPING_X)
    assert engine.tick().phase is GamePhase.GAME_OVER


def test_new_engine_is_idle(engine: SimulationEngine) -> None:
    snap = engine.snapshot()
    assert snap.phase is GamePhase.NOT_STARTED
    assert snap.player == PlayerState(is_jumping=False)
    assert snap.obstacles == ()
    assert snap.score == 0
    assert snap.music_on is False
    assert snap.signals == ()


def test_tick_before_start_is_noop(engine: SimulationEngine) -> None:
    for _ in range(10):
        snap = engine.tick()
    assert snap.phase is GamePhase.NOT_STARTED
    assert snap.score == 0
    assert engine.tick_count == 0


def test_start_turns_music_on(engine: SimulationEngine) -> None:
    snap = engine.start()
    assert snap.phase is GamePhase.PLAYING
    assert snap.music_on is True
    assert snap.signals == (Signal.MUSIC_ON,)


def test_start_only_from_not_started(started: SimulationEngine) -> None:
    started.tick()
    snap = started.start()
    assert snap.signals == ()
    assert snap.score == 1

    _crash(started)
    snap = started.start()
    assert snap.phase is GamePhase.GAME_OVER
    assert snap.signals == ()


def test_jump_emits_signal(started: SimulationEngine) -> None:
    snap = started.request_jump()
    assert snap.player.is_jumping is True
    assert snap.signals == (Signal.JUMP,)


@pytest.mark.parametrize("setup", ["not_started", "already_jumping", "game_over"])
def test_jump_guards(engine: SimulationEngine, setup: str) -> None:
    if setup != "not_started":
        engine.start()
    if setup == "already_jumping":
        engine.request_jump()
        engine.tick()
    if setup == "game_over":
        _crash(engine)

    before = engine.snapshot()
    snap = engine.request_jump()
    assert snap.signals == ()
    assert snap.player == before.player
    assert snap.phase is before.phase


def test_jump_lasts_jump_ticks(started: SimulationEngine) -> None:
    jump_ticks = started.config.jump_ticks
    assert jump_ticks == 12
    started.request_jump()
    for _ in range(jump_ticks):
        assert started.tick().player.is_jumping is True
    assert started.tick().player.is_jumping is False


def test_can_jump_again_after_landing(started: SimulationEngine) -> None:
    started.request_jump()
    for _ in range(started.config.jump_ticks + 1):
        started.tick()
    assert started.request_jump().signals == (Signal.JUMP,)


def test_jump_timer_uses_elapsed_time(started: SimulationEngine) -> None:
    started.request_jump()
    for _ in range(6):
        assert started.tick(dt_ms=100).player.is_jumping is True
    assert started.tick(dt_ms=100).player.is_jumping is False


@pytest.mark.parametrize("dt_ms", [0, -50])
def test_non_positive_step_still_lands_jump(started: SimulationEngine, dt_ms: float) -> None:
    started.request_jump()
    for _ in range(started.config.jump_ticks):
        assert started.tick(dt_ms=dt_ms).player.is_jumping is True
    assert started.tick(dt_ms=dt_ms).player.is_jumping is False


def test_score_counts_successful_ticks(started: SimulationEngine) -> None:
    for expected in range(1, 51):
        assert started.tick().score == expected
    assert started.tick_count == 50


def test_no_spawns_for_500_ticks(started: SimulationEngine) -> None:
    for _ in range(500):
        snap = started.tick()
    assert snap.score == 500
    assert snap.obstacles == ()
    assert snap.phase is GamePhase.PLAYING


def test_obstacle_moves_left_each_tick(harmless_engine: SimulationEngine) -> None:
    obstacle = harmless_engine.spawn_obstacle()
    assert obstacle == Obstacle(id=obstacle.id, x=100.0)
    snap = harmless_engine.tick()
    assert snap.obstacles == (Obstacle(id=obstacle.id, x=98.0),)


def test_obstacle_culled_at_threshold(harmless_engine: SimulationEngine) -> None:
    obstacle = harmless_engine.spawn_obstacle()
    for _ in range(74):
        snap = harmless_engine.tick()
    assert [o.x for o in snap.obstacles] == [-48.0]

    snap = harmless_engine.tick()
    assert snap.obstacles == ()

    for _ in range(20):
        snap = harmless_engine.tick()
        assert all(o.id != obstacle.id for o in snap.obstacles)


def test_obstacle_gone_after_76_ticks(harmless_engine: SimulationEngine) -> None:
    harmless_engine.spawn_obstacle(100)
    for _ in range(76):
        snap = harmless_engine.tick()
    assert snap.obstacles == ()
    assert snap.phase is GamePhase.PLAYING
    assert snap.score == 76


def test_certain_spawn_assigns_unique_ids() -> None:
    engine = SimulationEngine(EngineConfig(spawn_probability=1.0, viewport_width=1.0), rng=random.Random(0))
    engine.start()
    for _ in range(10):
        snap = engine.tick()
    ids = [o.id for o in snap.obstacles]
    assert ids == sorted(ids)
    assert len(set(ids)) == 10
    assert [o.x for o in snap.obstacles] == [82.0 + 2 * i for i in range(10)]


def test_spawn_obstacle_ignored_outside_run(engine: SimulationEngine) -> None:
    assert engine.spawn_obstacle() is None
    engine.start()
    _crash(engine)
    assert engine.spawn_obstacle() is None


def test_collision_ends_run(started: SimulationEngine) -> None:
    for _ in range(3):
        started.tick()
    started.spawn_obstacle(OVERLAPPING_X)
    snap = started.tick()
    assert snap.phase is GamePhase.GAME_OVER
    assert snap.score == 3
    assert snap.music_on is False
    assert snap.signals == (Signal.MUSIC_OFF, Signal.GAME_OVER)
    # The movement applied before the collision test stands.
    assert [o.x for o in snap.obstacles] == [8.0]


def test_late_jump_does_not_undo_collision(started: SimulationEngine) -> None:
    started.spawn_obstacle(OVERLAPPING_X)
    snap = started.tick()
    assert snap.phase is GamePhase.GAME_OVER

    snap = started.request_jump()
    assert snap.signals == ()
    assert snap.player.is_jumping is False
    assert snap.phase is GamePhase.GAME_OVER


def test_jumping_player_clears_obstacle(started: SimulationEngine) -> None:
    started.request_jump()
    started.spawn_obstacle(OVERLAPPING_X)
    snap = started.tick()
    assert snap.phase is GamePhase.PLAYING
    assert snap.score == 1


def test_game_over_without_music_only_signals_game_over(started: SimulationEngine) -> None:
    started.toggle_music()
    started.spawn_obstacle(OVERLAPPING_X)
    snap = started.tick()
    assert snap.signals == (Signal.GAME_OVER,)


def test_game_over_freezes_state(started: SimulationEngine) -> None:
    started.tick()
    _crash(started)
    frozen = started.snapshot()
    for _ in range(25):
        snap = started.tick()
        assert snap.score == frozen.score
        assert snap.obstacles == frozen.obstacles
        assert snap.player == frozen.player
        assert snap.phase is GamePhase.GAME_OVER
        assert snap.signals == ()


def test_post_move_collision_order(started: SimulationEngine) -> None:
    started.spawn_obstacle(REACHES_PLAYER_X)
    assert started.tick().phase is GamePhase.GAME_OVER


def test_stale_collision_order_lags_one_tick() -> None:
    engine = SimulationEngine(EngineConfig(spawn_probability=0.0, collide_before_move=True))
    engine.start()
    engine.spawn_obstacle(REACHES_PLAYER_X)
    snap = engine.tick()
    assert snap.phase is GamePhase.PLAYING
    assert snap.score == 1
    assert engine.tick().phase is GamePhase.GAME_OVER


def test_restart_only_from_game_over(engine: SimulationEngine) -> None:
    assert engine.restart().signals == ()
    assert engine.phase is GamePhase.NOT_STARTED
    engine.start()
    engine.tick()
    snap = engine.restart()
    assert snap.signals == ()
    assert snap.score == 1


def test_restart_resets_run(started: SimulationEngine) -> None:
    for _ in range(7):
        started.tick()
    started.spawn_obstacle(50)
    started.request_jump()
    started.spawn_obstacle(OVERLAPPING_X)
    # Let the jump expire while the obstacle closes in.
    while started.phase is GamePhase.PLAYING:
        started.tick()

    snap = started.restart()
    assert snap.phase is GamePhase.PLAYING
    assert snap.obstacles == ()
    assert snap.score == 0
    assert snap.player.is_jumping is False
    assert snap.music_on is True
    assert snap.signals == (Signal.MUSIC_RESTART,)
    assert started.tick_count == 0
    assert started.tick().score == 1


def test_ids_keep_increasing_across_restart(started: SimulationEngine) -> None:
    first = started.spawn_obstacle(OVERLAPPING_X)
    started.tick()
    started.restart()
    second = started.spawn_obstacle()
    assert second.id > first.id


def test_toggle_music_any_phase(engine: SimulationEngine) -> None:
    assert engine.toggle_music().signals == (Signal.MUSIC_ON,)
    assert engine.toggle_music().signals == (Signal.MUSIC_OFF,)
    assert engine.phase is GamePhase.NOT_STARTED

    engine.start()
    engine.tick()
    snap = engine.toggle_music()
    assert snap.music_on is False
    assert snap.score == 1
    assert snap.phase is GamePhase.PLAYING


def test_snapshot_boxes_follow_jump_state(started: SimulationEngine) -> None:
    assert started.snapshot().player_box.bottom == 100
    started.request_jump()
    assert started.snapshot().player_box.bottom == 200

    started.spawn_obstacle(50)
    [(obstacle, box)] = started.snapshot().obstacle_boxes()
    assert obstacle.x == 50
    assert box.left == 640
    assert box.bottom == 100


def test_seeded_engines_agree() -> None:
    def run(seed: int) -> list:
        eng = SimulationEngine(EngineConfig(spawn_probability=0.05), rng=random.Random(seed))
        eng.start()
        history = []
        for step in range(400):
            if step % 9 == 0:
                eng.request_jump()
            snap = eng.tick()
            history.append((snap.phase, snap.score, snap.obstacles, snap.player))
            if snap.phase is GamePhase.GAME_OVER:
                eng.restart()
        return history

    assert run(42) == run(42)


def test_engines_are_independent() -> None:
    a = SimulationEngine(EngineConfig(spawn_probability=0.0))
    b = SimulationEngine(EngineConfig(spawn_probability=0.0))
    a.start()
    a.tick()
    assert b.phase is GamePhase.NOT_STARTED
    assert b.score == 0


def test_random_command_sequences_never_raise() -> None:
    rng = random.Random(2024)
    engine = SimulationEngine(EngineConfig(spawn_probability=0.1), rng=random.Random(7))
    commands = [
        engine.tick,
        engine.tick,
        engine.tick,
        engine.request_jump,
        engine.restart,
        engine.start,
        engine.toggle_music,
    ]
    seen_ids: set[int] = set()
    for _ in range(3000):
        snap = rng.choice(commands)()
        assert snap.score >= 0
        ids = [o.id for o in snap.obstacles]
        assert len(ids) == len(set(ids))
        assert all(o.x > engine.config.cull_threshold for o in snap.obstacles)
        assert len(snap.signals) == len(set(snap.signals))
        seen_ids.update(ids)
    assert seen_ids
