"""REST API route handlers for configuration and session inspection."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from chroma_snake.server.models import ConfigResponse, SessionSummary

router = APIRouter(tags=["game"])


def _get_manager(request: Request):
    return request.app.state.session_manager


@router.get("/config")
async def get_config(request: Request) -> ConfigResponse:
    """Return the active game configuration."""
    return ConfigResponse.from_config(_get_manager(request).config)


@router.get("/sessions")
async def list_sessions(request: Request) -> list[SessionSummary]:
    """List live sessions."""
    return _get_manager(request).list_sessions()


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, request: Request) -> dict:
    """Get a session summary and its current state snapshot."""
    session = _get_manager(request).get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    result = session.summary().model_dump()
    result["state"] = session.snapshot()
    return result


@router.post("/sessions/{session_id}/reset")
async def reset_session(session_id: str, request: Request) -> dict:
    """Restart the game in a session."""
    manager = _get_manager(request)
    try:
        return await manager.reset_session(session_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
