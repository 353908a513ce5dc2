"""Pydantic models for API responses."""

from __future__ import annotations

from pydantic import BaseModel

from chroma_snake.config import GameConfig


class ConfigResponse(BaseModel):
    """Active game configuration."""

    grid_size: int
    initial_cell: tuple[int, int]
    initial_color: str
    tick_interval_ms: int
    food_timeout_ms: int
    food_sample_attempts: int
    seed: int | None
    max_sessions: int

    @classmethod
    def from_config(cls, config: GameConfig) -> ConfigResponse:
        return cls(**config.to_dict())


class SessionSummary(BaseModel):
    """Compact session info for list endpoints."""

    session_id: str
    tick: int
    score: int
    game_over: bool
    connected: bool
