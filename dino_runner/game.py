"""Game loop and rendering for the dino runner."""

from __future__ import annotations

import logging
from typing import Optional

import pygame

from .audio import AudioPlayer, AudioSink
from .config import EngineConfig, GameConfig, RenderingConfig
from .engine import GamePhase, SimulationEngine, Snapshot
from .input import InputProvider, InputState, KeyboardInput

logger = logging.getLogger(__name__)

CONTROLS_HINT = "Up/Space: Jump | Enter: Music | R: Restart"


class TickDriver:
    """Turns variable frame times into a whole number of fixed ticks."""

    def __init__(self, tick_ms: float, max_ticks_per_frame: int = 5) -> None:
        self.tick_ms = tick_ms
        self.max_ticks_per_frame = max_ticks_per_frame
        self._accumulator = 0.0

    def advance(self, frame_ms: float) -> int:
        self._accumulator += max(0.0, frame_ms)
        ticks = int(self._accumulator // self.tick_ms)
        self._accumulator -= ticks * self.tick_ms
        if ticks > self.max_ticks_per_frame:
            # Drop the backlog after a stall instead of fast-forwarding the run.
            logger.debug("Dropping %d ticks after a slow frame", ticks - self.max_ticks_per_frame)
            ticks = self.max_ticks_per_frame
        return ticks

    def reset(self) -> None:
        self._accumulator = 0.0

    @property
    def pending_ms(self) -> float:
        return self._accumulator


class Renderer:
    """Draws a snapshot onto a pygame surface."""

    def __init__(self, surface: pygame.Surface, config: RenderingConfig, engine_cfg: EngineConfig) -> None:
        self.surface = surface
        self.cfg = config
        self.engine_cfg = engine_cfg
        self.score_font = pygame.font.Font(None, config.score_font_size)
        self.title_font = pygame.font.Font(None, config.title_font_size)
        self.body_font = pygame.font.Font(None, config.body_font_size)
        self.hint_font = pygame.font.Font(None, config.hint_font_size)
        self._sky: Optional[tuple[tuple[int, int], pygame.Surface]] = None
        self._player_bottom = engine_cfg.ground_height
        self.buttons: dict[str, pygame.Rect] = {}

    def _to_screen(self, left: float, bottom: float, width: float, height: float) -> pygame.Rect:
        surface_height = self.surface.get_height()
        return pygame.Rect(int(left), int(surface_height - bottom - height), int(width), int(height))

    def _ease_player(self, target: float, dt_ms: float) -> float:
        transition = self.cfg.jump_transition_ms
        if transition <= 0:
            self._player_bottom = target
            return target
        span = abs(self.engine_cfg.jump_height - self.engine_cfg.ground_height)
        step = span * dt_ms / transition
        delta = target - self._player_bottom
        if abs(delta) <= step:
            self._player_bottom = target
        else:
            self._player_bottom += step if delta > 0 else -step
        return self._player_bottom

    def draw(self, snapshot: Snapshot, dt_ms: float) -> None:
        self.buttons = {}
        self._draw_background()
        self._draw_player(snapshot, dt_ms)
        self._draw_obstacles(snapshot)
        self._draw_hud(snapshot)
        if snapshot.phase is GamePhase.GAME_OVER:
            self._draw_game_over(snapshot)
        elif snapshot.phase is GamePhase.NOT_STARTED:
            self._draw_start_prompt()

    def _draw_background(self) -> None:
        size = self.surface.get_size()
        if self._sky is None or self._sky[0] != size:
            sky = pygame.Surface(size)
            width, height = size
            top, bottom = self.cfg.sky_top_color, self.cfg.sky_bottom_color
            for row in range(height):
                blend = row / max(1, height - 1)
                color = tuple(int(a + (b - a) * blend) for a, b in zip(top, bottom))
                pygame.draw.line(sky, color, (0, row), (width, row))
            self._sky = (size, sky)
        self.surface.blit(self._sky[1], (0, 0))

        width, height = size
        ground = int(self.engine_cfg.ground_height)
        pygame.draw.rect(self.surface, self.cfg.ground_color, pygame.Rect(0, height - ground, width, ground))

    def _draw_player(self, snapshot: Snapshot, dt_ms: float) -> None:
        box = snapshot.player_box
        bottom = self._ease_player(box.bottom, dt_ms)
        rect = self._to_screen(box.left, bottom, box.width, box.height)
        pygame.draw.rect(self.surface, self.cfg.player_color, rect, border_radius=self.cfg.corner_radius)

    def _draw_obstacles(self, snapshot: Snapshot) -> None:
        width = self.surface.get_width()
        for obstacle, box in snapshot.obstacle_boxes():
            # The window may be wider or narrower than the simulated viewport.
            left = obstacle.x / 100.0 * width
            rect = self._to_screen(left, box.bottom, box.width, box.height)
            pygame.draw.rect(self.surface, self.cfg.obstacle_color, rect, border_radius=self.cfg.corner_radius)

    def _draw_hud(self, snapshot: Snapshot) -> None:
        score = self.score_font.render(f"Score: {snapshot.score}", True, self.cfg.ui_color)
        self.surface.blit(score, (16, 16))

        music = "Music: on" if snapshot.music_on else "Music: off"
        music_surf = self.hint_font.render(music, True, self.cfg.hint_color)
        self.surface.blit(music_surf, music_surf.get_rect(topright=(self.surface.get_width() - 16, 16)))

        hint = self.hint_font.render(CONTROLS_HINT, True, self.cfg.hint_color)
        self.surface.blit(hint, hint.get_rect(bottomleft=(16, self.surface.get_height() - 16)))

    def _draw_overlay(self) -> None:
        overlay = pygame.Surface(self.surface.get_size(), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, self.cfg.overlay_alpha))
        self.surface.blit(overlay, (0, 0))

    def _draw_panel(self, title: str, lines: list[str], button_key: str, button_label: str) -> None:
        self._draw_overlay()
        width, height = self.surface.get_size()
        title_surf = self.title_font.render(title, True, self.cfg.ui_color)
        line_surfs = [self.body_font.render(line, True, self.cfg.hint_color) for line in lines]
        button_surf = self.body_font.render(button_label, True, self.cfg.button_text_color)

        content_width = max([title_surf.get_width(), button_surf.get_width()] + [s.get_width() for s in line_surfs])
        panel = pygame.Rect(0, 0, content_width + 64, 150 + 28 * len(line_surfs))
        panel.center = (width // 2, height // 2)
        pygame.draw.rect(self.surface, self.cfg.panel_color, panel, border_radius=self.cfg.corner_radius * 2)

        y = panel.top + 24
        self.surface.blit(title_surf, title_surf.get_rect(midtop=(panel.centerx, y)))
        y += title_surf.get_height() + 16
        for surf in line_surfs:
            self.surface.blit(surf, surf.get_rect(midtop=(panel.centerx, y)))
            y += 28

        button = button_surf.get_rect(midtop=(panel.centerx, y + 8)).inflate(32, 16)
        pygame.draw.rect(self.surface, self.cfg.button_color, button, border_radius=self.cfg.corner_radius)
        self.surface.blit(button_surf, button_surf.get_rect(center=button.center))
        self.buttons[button_key] = button

    def _draw_start_prompt(self) -> None:
        self._draw_panel(
            "Dino Game",
            ["Press Up or Space to Jump", "Press R to Restart after Game Over"],
            "start",
            "Start Game",
        )

    def _draw_game_over(self, snapshot: Snapshot) -> None:
        self._draw_panel("Game Over!", [f"Your Score: {snapshot.score}"], "restart", "Play Again (R)")

    def button_at(self, pos: tuple[int, int]) -> Optional[str]:
        for key, rect in self.buttons.items():
            if rect.collidepoint(pos):
                return key
        return None


class DinoGame:
    """High-level game orchestration: window, fixed-step ticking, input, audio."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        input_provider: Optional[InputProvider] = None,
        audio: Optional[AudioSink] = None,
        engine: Optional[SimulationEngine] = None,
    ) -> None:
        pygame.init()
        pygame.font.init()

        self.config = config or GameConfig()
        self.screen = pygame.display.set_mode(self.config.window_size)
        pygame.display.set_caption(self.config.title)

        self.clock = pygame.time.Clock()
        self.engine = engine or SimulationEngine(self.config.engine)
        self.driver = TickDriver(self.engine.config.tick_ms)
        self.renderer = Renderer(self.screen, self.config.render, self.engine.config)
        self.input_provider = input_provider or KeyboardInput()
        self.audio = audio or AudioPlayer(self.config.audio)
        self.running = True
        self.snapshot = self.engine.snapshot()

    def _apply(self, snapshot: Snapshot) -> None:
        self.snapshot = snapshot
        if snapshot.signals:
            self.audio.handle(snapshot.signals)

    def _handle_commands(self, commands: InputState) -> None:
        if commands.quit:
            self.running = False
            return
        phase = self.engine.phase
        if phase is GamePhase.NOT_STARTED:
            if commands.start or commands.jump or commands.toggle_music:
                self._apply(self.engine.start())
                self.driver.reset()
            return
        if commands.toggle_music:
            self._apply(self.engine.toggle_music())
        if commands.restart and phase is GamePhase.GAME_OVER:
            self._apply(self.engine.restart())
            self.driver.reset()
        elif commands.jump:
            self._apply(self.engine.request_jump())

    def _handle_clicks(self, events: list[pygame.event.Event]) -> InputState:
        commands = InputState()
        for event in events:
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                button = self.renderer.button_at(event.pos)
                if button == "start":
                    commands = commands.merge(InputState(start=True))
                elif button == "restart":
                    commands = commands.merge(InputState(restart=True))
        return commands

    def run(self) -> None:
        while self.running:
            frame_ms = self.clock.tick(self.config.target_fps)
            events = pygame.event.get()
            commands = self.input_provider.poll(events).merge(self._handle_clicks(events))
            self._handle_commands(commands)

            if self.engine.phase is GamePhase.PLAYING:
                for _ in range(self.driver.advance(frame_ms)):
                    self._apply(self.engine.tick())
                    if self.engine.phase is not GamePhase.PLAYING:
                        break
            else:
                self.snapshot = self.engine.snapshot()

            self.renderer.draw(self.snapshot, frame_ms)
            pygame.display.flip()

        if hasattr(self.input_provider, "shutdown"):
            self.input_provider.shutdown()  # type: ignore[attr-defined]
        self.audio.shutdown()
        pygame.quit()
