"""Keyboard input mapping."""

from __future__ import annotations

from chroma_snake.snake import Direction

KEY_BINDINGS: dict[str, Direction] = {
    "arrowup": Direction.UP,
    "w": Direction.UP,
    "arrowdown": Direction.DOWN,
    "s": Direction.DOWN,
    "arrowleft": Direction.LEFT,
    "a": Direction.LEFT,
    "arrowright": Direction.RIGHT,
    "d": Direction.RIGHT,
}


def direction_for_key(key: str) -> Direction | None:
    """Map a key name to a direction, case-insensitively.

    Returns ``None`` for keys that do not steer the snake.
    """
    return KEY_BINDINGS.get(key.lower())
