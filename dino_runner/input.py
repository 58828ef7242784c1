"""Input abstractions for the dino runner."""

from __future__ import annotations

import json
import logging
import socket
import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, Optional, Protocol

import pygame

from .config import SocketInputConfig

logger = logging.getLogger(__name__)

JUMP_KEYS = (pygame.K_SPACE, pygame.K_UP)
MUSIC_KEYS = (pygame.K_RETURN, pygame.K_KP_ENTER)


@dataclass(frozen=True)
class InputState:
    """Commands requested since the previous poll. Each flag is a single press."""

    jump: bool = False
    restart: bool = False
    start: bool = False
    toggle_music: bool = False
    quit: bool = False

    def merge(self, other: "InputState") -> "InputState":
        return InputState(
            jump=self.jump or other.jump,
            restart=self.restart or other.restart,
            start=self.start or other.start,
            toggle_music=self.toggle_music or other.toggle_music,
            quit=self.quit or other.quit,
        )


class InputProvider(Protocol):
    """Interface for supplying player commands to the game loop."""

    def poll(self, events: Iterable[pygame.event.Event]) -> InputState:
        """Return the commands issued since the last poll."""


class KeyboardInput(InputProvider):
    """Default keyboard controller (Space/Up to jump, R to restart, Enter for music)."""

    def poll(self, events: Iterable[pygame.event.Event]) -> InputState:
        jump = restart = toggle_music = quit_requested = False
        for event in events:
            if event.type == pygame.QUIT:
                quit_requested = True
            elif event.type == pygame.KEYDOWN:
                if event.key in JUMP_KEYS:
                    jump = True
                elif event.key == pygame.K_r:
                    restart = True
                elif event.key in MUSIC_KEYS:
                    toggle_music = True
                elif event.key == pygame.K_ESCAPE:
                    quit_requested = True
        return InputState(jump=jump, restart=restart, toggle_music=toggle_music, quit=quit_requested)


class SocketInput(InputProvider):
    """Listens for JSON control messages over TCP to drive the game.

    Each newline-terminated message is an object such as ``{"jump": true}``.
    Recognised keys are ``jump``, ``restart``, ``start`` and ``music``.
    Commands are queued by the listener thread and handed out on the next poll.
    """

    def __init__(
        self,
        base: Optional[InputProvider] = None,
        config: Optional[SocketInputConfig] = None,
        autostart: bool = True,
    ) -> None:
        self.base = base or KeyboardInput()
        self.cfg = config or SocketInputConfig()
        self._lock = threading.Lock()
        self._pending: Deque[InputState] = deque(maxlen=self.cfg.max_queued_commands)
        self._running = threading.Event()
        self.listening = threading.Event()
        self.address: Optional[tuple[str, int]] = None
        self._server: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        if autostart:
            self.start()

    def start(self) -> bool:
        """Bind the control socket and start accepting drivers.

        Returns False when the port cannot be bound; keyboard input keeps working.
        """
        if self._thread and self._thread.is_alive():
            return True
        server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            server.bind((self.cfg.host, self.cfg.port))
            server.listen(self.cfg.backlog)
        except OSError as exc:
            server.close()
            logger.warning("Socket input disabled, cannot listen on %s:%s: %s", self.cfg.host, self.cfg.port, exc)
            return False
        server.settimeout(0.2)
        self._server = server
        self.address = server.getsockname()[:2]
        self._running.set()
        self._thread = threading.Thread(target=self._accept_drivers, name="SocketInput", daemon=True)
        self._thread.start()
        self.listening.set()
        logger.info("Socket input listening on %s:%s", *self.address)
        return True

    def poll(self, events: Iterable[pygame.event.Event]) -> InputState:
        state = self.base.poll(events)
        with self._lock:
            while self._pending:
                state = state.merge(self._pending.popleft())
        return state

    def reset(self) -> None:
        with self._lock:
            self._pending.clear()

    def shutdown(self) -> None:
        self._running.clear()
        self.listening.clear()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=1.5)
        if self._server is not None:
            self._server.close()
            self._server = None
        if hasattr(self.base, "shutdown"):
            self.base.shutdown()  # type: ignore[attr-defined]

    def _accept_drivers(self) -> None:
        server = self._server
        while self._running.is_set():
            try:
                client, addr = server.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            client.settimeout(self.cfg.read_timeout)
            logger.info("Control driver connected from %s:%s", *addr[:2])
            threading.Thread(target=self._read_commands, args=(client,), daemon=True).start()

    def _read_commands(self, client: socket.socket) -> None:
        pending = b""
        with client:
            while self._running.is_set():
                try:
                    data = client.recv(4096)
                except socket.timeout:
                    continue
                except OSError:
                    break
                if not data:
                    break
                *lines, pending = (pending + data).split(b"\n")
                for line in lines:
                    self._process_line(line.strip())
                if len(pending) > self.cfg.max_line_bytes:
                    logger.warning("Dropping control driver: line exceeds %d bytes", self.cfg.max_line_bytes)
                    break

    def _process_line(self, raw: bytes) -> None:
        if not raw:
            return
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.debug("Ignoring malformed control line %r", raw)
            return
        if not isinstance(payload, dict):
            logger.debug("Ignoring non-object control message %r", payload)
            return

        command = InputState(
            jump=bool(payload.get("jump")),
            restart=bool(payload.get("restart")),
            start=bool(payload.get("start")),
            toggle_music=bool(payload.get("music")),
        )
        if command == InputState():
            return
        with self._lock:
            self._pending.append(command)
