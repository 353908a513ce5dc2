"""Tests for game sessions: timer and listener lifecycle."""

from __future__ import annotations

import asyncio
import json

import pytest
from starlette.websockets import WebSocketState

from chroma_snake.config import GameConfig
from chroma_snake.server.session import GameSession, SessionManager
from chroma_snake.snake import Direction


class FakeWebSocket:
    """In-memory stand-in for a connected Starlette WebSocket."""

    def __init__(self, fail_sends: bool = False) -> None:
        self.client_state = WebSocketState.CONNECTED
        self.sent: list[dict] = []
        self.incoming: asyncio.Queue[dict] = asyncio.Queue()
        self.fail_sends = fail_sends

    async def send_text(self, data: str) -> None:
        if self.fail_sends:
            raise RuntimeError("socket gone")
        self.sent.append(json.loads(data))

    async def receive(self) -> dict:
        message = await self.incoming.get()
        if message["type"] == "websocket.disconnect":
            self.client_state = WebSocketState.DISCONNECTED
        return message

    def send_from_client(self, text: str) -> None:
        self.incoming.put_nowait({"type": "websocket.receive", "text": text})

    def send_bytes_from_client(self, data: bytes) -> None:
        self.incoming.put_nowait({"type": "websocket.receive", "bytes": data})

    def disconnect(self) -> None:
        self.incoming.put_nowait({"type": "websocket.disconnect", "code": 1000})


def _manager(**config) -> SessionManager:
    config.setdefault("tick_interval_ms", 60_000)
    return SessionManager(GameConfig(**config))


async def _wait_for(predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.005)


class TestSessionManager:
    def test_open_and_list(self):
        manager = _manager()
        session = manager.open_session(FakeWebSocket())
        assert len(manager) == 1
        assert manager.get_session(session.session_id) is session
        summaries = manager.list_sessions()
        assert summaries[0].session_id == session.session_id
        assert summaries[0].score == 0
        assert summaries[0].connected is True

    def test_session_limit(self):
        manager = _manager(max_sessions=1)
        manager.open_session(FakeWebSocket())
        with pytest.raises(ValueError, match="Too many"):
            manager.open_session(FakeWebSocket())

    def test_remove_session(self):
        manager = _manager()
        session = manager.open_session(FakeWebSocket())
        manager.remove_session(session.session_id)
        manager.remove_session(session.session_id)
        assert len(manager) == 0

    def test_seeded_sessions_reproducible(self):
        a = _manager(seed=11).open_session(FakeWebSocket())
        b = _manager(seed=11).open_session(FakeWebSocket())
        assert a.engine.state.food == b.engine.state.food

    @pytest.mark.asyncio
    async def test_reset_unknown_session(self):
        with pytest.raises(KeyError):
            await _manager().reset_session("missing")


class TestSessionRun:
    @pytest.mark.asyncio
    async def test_initial_snapshot_then_disconnect(self):
        manager = _manager()
        ws = FakeWebSocket()
        session = manager.open_session(ws)
        task = asyncio.create_task(session.run())
        await _wait_for(lambda: len(ws.sent) == 1)
        assert ws.sent[0]["session_id"] == session.session_id
        assert ws.sent[0]["snake"][0] == {"x": 10, "y": 10, "color": "#4CAF50"}

        ws.disconnect()
        await asyncio.wait_for(task, timeout=2.0)
        assert session.closed
        assert session._timer.done()
        assert session._listener.done()

    @pytest.mark.asyncio
    async def test_key_input_pushes_state(self):
        ws = FakeWebSocket()
        session = _manager().open_session(ws)
        task = asyncio.create_task(session.run())
        await _wait_for(lambda: len(ws.sent) == 1)

        ws.send_from_client(json.dumps({"key": "ArrowUp"}))
        await _wait_for(lambda: len(ws.sent) == 2)
        assert ws.sent[1]["direction"] == "UP"
        assert session.engine.state.direction == Direction.UP

        ws.disconnect()
        await asyncio.wait_for(task, timeout=2.0)

    @pytest.mark.asyncio
    async def test_ignored_input_sends_nothing(self):
        ws = FakeWebSocket()
        session = _manager().open_session(ws)
        task = asyncio.create_task(session.run())
        await _wait_for(lambda: len(ws.sent) == 1)

        for raw in ["not-json", "[]", "7", '{"key": "q"}', '{"key": 3}',
                    '{"action": "jump"}', '{"key": "ArrowLeft"}']:
            ws.send_from_client(raw)
        ws.send_from_client(json.dumps({"action": "reset"}))
        await _wait_for(lambda: len(ws.sent) == 2)
        assert ws.sent[1]["direction"] == "RIGHT"
        assert ws.sent[1]["tick"] == 0

        ws.disconnect()
        await asyncio.wait_for(task, timeout=2.0)

    @pytest.mark.asyncio
    async def test_timer_ticks(self):
        ws = FakeWebSocket()
        session = _manager(tick_interval_ms=5).open_session(ws)
        task = asyncio.create_task(session.run())
        await _wait_for(lambda: len(ws.sent) >= 3)
        ticks = [msg["tick"] for msg in ws.sent]
        assert ticks[0] == 0
        assert ticks[1] >= 1

        ws.disconnect()
        await asyncio.wait_for(task, timeout=2.0)
        assert session._timer.done()

    @pytest.mark.asyncio
    async def test_send_failure_tears_down_both_tasks(self):
        ws = FakeWebSocket(fail_sends=True)
        session = _manager(tick_interval_ms=5).open_session(ws)
        await asyncio.wait_for(session.run(), timeout=2.0)
        assert session.closed
        assert session._timer.done()
        assert session._listener.done()

    @pytest.mark.asyncio
    async def test_cleanup_closes_running_sessions(self):
        manager = _manager()
        ws = FakeWebSocket()
        session = manager.open_session(ws)
        task = asyncio.create_task(session.run())
        await _wait_for(lambda: len(ws.sent) == 1)

        await manager.cleanup()
        await asyncio.wait_for(task, timeout=2.0)
        assert session.closed
        assert session._listener.done()
        assert len(manager) == 0

    @pytest.mark.asyncio
    async def test_reset_via_manager_pushes(self):
        manager = _manager()
        ws = FakeWebSocket()
        session = manager.open_session(ws)
        task = asyncio.create_task(session.run())
        await _wait_for(lambda: len(ws.sent) == 1)

        session.engine.handle_key("s")
        payload = await manager.reset_session(session.session_id)
        assert payload["direction"] == "RIGHT"
        await _wait_for(lambda: len(ws.sent) == 2)
        assert ws.sent[1]["direction"] == "RIGHT"

        ws.disconnect()
        await asyncio.wait_for(task, timeout=2.0)

    @pytest.mark.asyncio
    async def test_binary_frame_ignored(self):
        ws = FakeWebSocket()
        session = _manager().open_session(ws)
        task = asyncio.create_task(session.run())
        await _wait_for(lambda: len(ws.sent) == 1)

        ws.send_bytes_from_client(b"\x00\x01")
        ws.send_from_client(json.dumps({"key": "ArrowUp"}))
        await _wait_for(lambda: len(ws.sent) == 2)
        assert not session.closed
        assert not session._listener.done()
        assert session.engine.state.direction == Direction.UP

        ws.disconnect()
        await asyncio.wait_for(task, timeout=2.0)

    def test_countdown_frozen_after_game_over(self):
        clock = [0.0]
        manager = SessionManager(
            GameConfig(tick_interval_ms=60_000, initial_cell=(0, 0)),
            clock=lambda: clock[0],
        )
        session = manager.open_session(FakeWebSocket())
        session.engine.set_direction(Direction.UP)
        clock[0] = 1_000.0
        session.engine.tick()
        assert session.engine.game_over

        first = session.snapshot()
        clock[0] = 4_500.0
        session.engine.tick()
        second = session.snapshot()
        assert first["time_left_ms"] == second["time_left_ms"] == 4_000
        assert second["countdown_s"] == 4
        assert second["timer_urgent"] is False


class TestGameSessionSummary:
    def test_summary_when_closed(self):
        ws = FakeWebSocket()
        session = _manager().open_session(ws)
        assert isinstance(session, GameSession)
        session.closed = True
        assert session.summary().connected is False
