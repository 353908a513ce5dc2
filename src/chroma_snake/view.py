"""Renderer-facing helpers: cell colours, countdown, and snapshots."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chroma_snake.config import GameConfig
    from chroma_snake.engine import GameState

BACKGROUND = "#fff"
URGENT_BELOW_MS = 1000


def cell_color(
    state: GameState, x: int, y: int, background: str = BACKGROUND,
) -> str:
    """Colour of one cell: snake segment first, then food, then background."""
    for seg in state.snake:
        if seg.x == x and seg.y == y:
            return seg.color
    food = state.food
    if food is not None and food.x == x and food.y == y:
        return food.color
    return background


def board_colors(
    state: GameState, grid_size: int, background: str = BACKGROUND,
) -> list[list[str]]:
    """Row-major colour matrix for the whole board, indexed ``[y][x]``."""
    rows = [[background] * grid_size for _ in range(grid_size)]
    if state.food is not None:
        rows[state.food.y][state.food.x] = state.food.color
    for seg in reversed(state.snake):
        rows[seg.y][seg.x] = seg.color
    return rows


def time_left_ms(state: GameState, now: float, food_timeout_ms: float) -> float:
    """Milliseconds until the next shrink, floored at zero.

    Frozen at the moment the game ended once it is over.
    """
    if state.ended_at is not None:
        now = state.ended_at
    return max(0.0, food_timeout_ms - (now - state.last_food_time))


def countdown_seconds(
    state: GameState, now: float, food_timeout_ms: float,
) -> int:
    return math.ceil(time_left_ms(state, now, food_timeout_ms) / 1000)


def snapshot(state: GameState, config: GameConfig, now: float) -> dict:
    """Serializable state plus the derived values a renderer displays."""
    remaining = time_left_ms(state, now, config.food_timeout_ms)
    payload = state.to_dict()
    payload.update(
        grid_size=config.grid_size,
        time_left_ms=remaining,
        countdown_s=math.ceil(remaining / 1000),
        timer_urgent=remaining < URGENT_BELOW_MS,
    )
    return payload
