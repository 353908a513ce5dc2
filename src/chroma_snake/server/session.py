"""Per-connection game sessions and the registry that tracks them."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass, field

import numpy as np
from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from chroma_snake import view
from chroma_snake.config import GameConfig
from chroma_snake.engine import Clock, GameEngine
from chroma_snake.server.models import SessionSummary

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """One player's game, driven by a timer task and an input listener task.

    The two tasks are started together by :meth:`run` and always torn down
    together by :meth:`close`. Every state change and the snapshot it
    produces happen under :attr:`lock`.
    """

    session_id: str
    engine: GameEngine
    websocket: WebSocket
    created_at: float = field(default_factory=time.monotonic)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    closed: bool = False
    _timer: asyncio.Task | None = field(default=None, repr=False)
    _listener: asyncio.Task | None = field(default=None, repr=False)

    @property
    def connected(self) -> bool:
        return (
            not self.closed
            and self.websocket.client_state == WebSocketState.CONNECTED
        )

    def summary(self) -> SessionSummary:
        state = self.engine.state
        return SessionSummary(
            session_id=self.session_id,
            tick=state.tick,
            score=state.score,
            game_over=state.game_over,
            connected=self.connected,
        )

    def snapshot(self) -> dict:
        engine = self.engine
        payload = view.snapshot(engine.state, engine.config, engine.clock())
        payload["session_id"] = self.session_id
        return payload

    async def run(self) -> None:
        """Play until the client leaves or the session is closed."""
        async with self.lock:
            await self.push()
        self._timer = asyncio.create_task(
            self._tick_loop(), name=f"timer-{self.session_id}",
        )
        self._listener = asyncio.create_task(
            self._listen(), name=f"listener-{self.session_id}",
        )
        try:
            await asyncio.wait(
                {self._timer, self._listener},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            await self.close()

    async def close(self) -> None:
        """Cancel the timer and the listener and wait for both to finish."""
        tasks = [
            t for t in (self._timer, self._listener)
            if t is not None and not t.done()
        ]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        if not self.closed:
            self.closed = True
            logger.info("Session %s closed.", self.session_id)

    async def reset(self) -> dict:
        """Restart the game and push the fresh state."""
        async with self.lock:
            self.engine.reset()
            await self.push()
            return self.snapshot()

    async def push(self) -> bool:
        """Send the current snapshot. Returns False if the socket is gone.

        Callers must hold :attr:`lock`.
        """
        ws = self.websocket
        if ws.client_state != WebSocketState.CONNECTED:
            return False
        payload = json.dumps(self.snapshot(), separators=(",", ":"))
        try:
            await ws.send_text(payload)
        except Exception:
            logger.info("Send failed for session %s.", self.session_id)
            return False
        return True

    async def _tick_loop(self) -> None:
        """Tick the engine at the configured interval and push each state."""
        interval = self.engine.config.tick_interval_ms / 1000.0
        try:
            while True:
                await asyncio.sleep(interval)
                async with self.lock:
                    self.engine.tick()
                    if not await self.push():
                        return
        except asyncio.CancelledError:
            logger.debug("Timer cancelled for session %s.", self.session_id)
        except Exception:
            logger.exception("Tick loop error in session %s.", self.session_id)

    async def _listen(self) -> None:
        """Apply player input messages until the client disconnects."""
        try:
            while True:
                message = await self.websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(
                        message.get("code", 1000), message.get("reason"),
                    )
                raw = message.get("text")
                if raw is None:
                    continue
                try:
                    msg = json.loads(raw)
                except json.JSONDecodeError:
                    continue
                if not isinstance(msg, dict):
                    continue

                async with self.lock:
                    if self._apply(msg):
                        await self.push()
        except WebSocketDisconnect:
            logger.info("Session %s disconnected.", self.session_id)
        except asyncio.CancelledError:
            logger.debug("Listener cancelled for session %s.", self.session_id)
        except Exception:
            logger.exception("Listener error in session %s.", self.session_id)

    def _apply(self, msg: dict) -> bool:
        """Apply one input message. Returns True if the state changed."""
        if msg.get("action") == "reset":
            self.engine.reset()
            return True
        key = msg.get("key")
        if isinstance(key, str):
            return self.engine.handle_key(key)
        return False


class SessionManager:
    """Registry of live game sessions."""

    def __init__(
        self,
        config: GameConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config if config is not None else GameConfig()
        self._clock = clock
        self._seeds = np.random.SeedSequence(self.config.seed)
        self._sessions: dict[str, GameSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def open_session(self, websocket: WebSocket) -> GameSession:
        """Create a session with a fresh game for *websocket*."""
        if len(self._sessions) >= self.config.max_sessions:
            raise ValueError("Too many active sessions. Try again later.")

        # Each session draws from its own child stream of the configured seed.
        rng = np.random.default_rng(self._seeds.spawn(1)[0])
        engine = GameEngine(self.config, clock=self._clock, rng=rng)
        session_id = uuid.uuid4().hex[:12]
        session = GameSession(
            session_id=session_id, engine=engine, websocket=websocket,
        )
        self._sessions[session_id] = session
        logger.info(
            "Session %s opened (%d live).", session_id, len(self._sessions),
        )
        return session

    def get_session(self, session_id: str) -> GameSession | None:
        return self._sessions.get(session_id)

    def remove_session(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def list_sessions(self) -> list[SessionSummary]:
        return [s.summary() for s in self._sessions.values()]

    async def reset_session(self, session_id: str) -> dict:
        """Reset a session's game and return its new snapshot."""
        session = self._sessions.get(session_id)
        if session is None:
            raise KeyError(f"Session {session_id} not found.")
        return await session.reset()

    async def cleanup(self) -> None:
        """Close every live session."""
        sessions = list(self._sessions.values())
        if sessions:
            await asyncio.gather(
                *(s.close() for s in sessions), return_exceptions=True,
            )
        self._sessions.clear()
        logger.info("SessionManager cleanup complete.")
