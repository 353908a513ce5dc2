"""Food spawning and colour generation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from chroma_snake.grid import Grid
    from chroma_snake.snake import Body

logger = logging.getLogger(__name__)

SATURATION = 70
LIGHTNESS = 50


def random_color(rng: np.random.Generator) -> str:
    """Return a bright colour with a random hue."""
    hue = int(rng.integers(360))
    return f"hsl({hue}, {SATURATION}%, {LIGHTNESS}%)"


@dataclass(frozen=True)
class Food:
    """A single piece of food on the board."""

    x: int
    y: int
    color: str

    @property
    def cell(self) -> tuple[int, int]:
        return self.x, self.y

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "color": self.color}


class FoodSpawner:
    """Places food on cells not covered by the snake.

    Uses a seeded NumPy RNG for reproducible placement. Cells are drawn
    uniformly and redrawn while they land on the snake; after
    *max_attempts* misses the free cells are scanned and one is drawn
    from those instead, so placement always terminates.
    """

    def __init__(
        self,
        grid: Grid,
        rng: np.random.Generator | None = None,
        max_attempts: int = 64,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self.grid = grid
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_attempts = max_attempts

    def spawn(self, body: Body) -> Food | None:
        """Return new food off the snake, or ``None`` if the board is full."""
        occupied = {seg.cell for seg in body}
        size = self.grid.size

        for _ in range(self.max_attempts):
            cell = (int(self.rng.integers(size)), int(self.rng.integers(size)))
            if cell not in occupied:
                return Food(cell[0], cell[1], random_color(self.rng))

        free = self.grid.free_cells(occupied)
        if not free:
            logger.warning("No empty cells available for food spawning.")
            return None
        logger.debug(
            "Rejection sampling gave up after %d draws; picking from %d free cells.",
            self.max_attempts, len(free),
        )
        x, y = free[int(self.rng.integers(len(free)))]
        return Food(x, y, random_color(self.rng))
