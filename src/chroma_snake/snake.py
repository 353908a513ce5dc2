"""Snake body representation and movement transforms."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Direction(enum.Enum):
    """Cardinal movement directions with (dx, dy) values."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)


# Pairs that would cause an instant 180° reversal.
_OPPOSITES: dict[Direction, Direction] = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


def is_reversal(current: Direction, new: Direction) -> bool:
    """Return True if *new* points straight back along *current*."""
    return _OPPOSITES[current] is new


@dataclass(frozen=True)
class Segment:
    """One occupied cell of the snake body, with its own colour."""

    x: int
    y: int
    color: str

    @property
    def cell(self) -> tuple[int, int]:
        return self.x, self.y

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "color": self.color}


Body = tuple[Segment, ...]


def next_head(body: Body, direction: Direction) -> tuple[int, int]:
    """Compute the cell the head moves into."""
    dx, dy = direction.value
    head = body[0]
    return head.x + dx, head.y + dy


def occupies(body: Body, cell: tuple[int, int]) -> bool:
    """Check whether any segment sits on *cell*."""
    return any(seg.cell == cell for seg in body)


def grow(body: Body, cell: tuple[int, int], color: str) -> Body:
    """Prepend a new head of the given colour; nothing is removed."""
    return (Segment(cell[0], cell[1], color), *body)


def slide(body: Body, cell: tuple[int, int]) -> Body:
    """Move the body one step with the head entering *cell*.

    Positions shift toward the head but colours stay with their rank:
    segment ``i`` of the result keeps the colour segment ``i`` had before,
    so colours appear to travel back through the body as the snake moves.
    """
    positions = [cell, *(seg.cell for seg in body[:-1])]
    return tuple(
        Segment(x, y, seg.color)
        for (x, y), seg in zip(positions, body, strict=True)
    )
