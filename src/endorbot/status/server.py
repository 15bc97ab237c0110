"""Read-only HTTP status view of the running bot."""
from __future__ import annotations

import json
import threading
from contextlib import contextmanager
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Iterator, Optional, Tuple

from endorbot.core.errors import StateLockTimeout
from endorbot.models.game_state import Action, GameState

LOCK_TIMEOUT = 1.0


class StateHolder:
    """
    Owns the current snapshot shared by the control loop and the status view.

    Every access takes the lock with a bounded wait and raises
    StateLockTimeout when it cannot get it in time.
    """

    def __init__(self, state: Optional[GameState] = None, lock_timeout: float = LOCK_TIMEOUT):
        self._lock = threading.Lock()
        self.lock_timeout = lock_timeout
        self._state = state or GameState()
        self._last_action: Optional[Action] = None
        self._tick = 0

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self.lock_timeout):
            raise StateLockTimeout(f"State lock not acquired within {self.lock_timeout}s")
        try:
            yield
        finally:
            self._lock.release()

    def update(self, state: GameState, action: Optional[Action], tick: int) -> None:
        with self._locked():
            self._state = state
            self._last_action = action
            self._tick = tick

    def get_state(self) -> GameState:
        """Independent copy of the current state."""
        with self._locked():
            return GameState.from_dict(self._state.to_dict())

    def snapshot(self) -> Dict[str, Any]:
        with self._locked():
            return {
                "tick": self._tick,
                "last_action": self._last_action.to_dict() if self._last_action else None,
                "state": self._state.to_dict(),
            }

    def render_grid(self) -> str:
        with self._locked():
            return self._state.dungeon.render_ascii()


def _handler_factory(holder: StateHolder):
    class Handler(BaseHTTPRequestHandler):
        def _send(self, code: int, body: bytes, content_type: str) -> None:
            self.send_response(code)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def _send_json(self, code: int, payload: Dict[str, Any]) -> None:
            self._send(code, json.dumps(payload, ensure_ascii=True).encode("utf-8"), "application/json")

        def do_GET(self) -> None:  # noqa: N802
            try:
                if self.path == "/status":
                    self._send_json(200, holder.snapshot())
                    return
                if self.path == "/grid":
                    self._send(200, (holder.render_grid() + "\n").encode("utf-8"), "text/plain; charset=utf-8")
                    return
            except StateLockTimeout as e:
                self._send_json(503, {"error": "busy", "detail": str(e)})
                return
            self._send_json(404, {"error": "not_found"})

        def log_message(self, format: str, *args: Any) -> None:
            return

    return Handler


def start_status_server(holder: StateHolder, *, host: str = "127.0.0.1", port: int = 8765) -> Tuple[ThreadingHTTPServer, threading.Thread]:
    server = ThreadingHTTPServer((host, port), _handler_factory(holder))
    thread = threading.Thread(target=server.serve_forever, name="status-view", daemon=True)
    thread.start()
    print(f"[STATUS] Serving on http://{host}:{server.server_address[1]}/status")
    return server, thread
