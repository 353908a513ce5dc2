"""Square grid geometry for the snake game."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np


class Grid:
    """Fixed N×N board.

    Coordinates are ``(x, y)`` with ``x`` growing rightward and ``y``
    downward. Occupancy masks are NumPy arrays indexed ``[y, x]``.
    """

    def __init__(self, size: int = 20) -> None:
        if size < 4:
            raise ValueError("Grid size must be at least 4×4.")
        self.size = size

    @property
    def cell_count(self) -> int:
        return self.size * self.size

    def in_bounds(self, x: int, y: int) -> bool:
        """Check whether a coordinate lies within the grid."""
        return 0 <= x < self.size and 0 <= y < self.size

    def occupancy(self, cells: Iterable[tuple[int, int]]) -> np.ndarray:
        """Return a boolean mask with ``True`` at every given cell."""
        mask = np.zeros((self.size, self.size), dtype=bool)
        for x, y in cells:
            mask[y, x] = True
        return mask

    def free_cells(self, occupied: Iterable[tuple[int, int]]) -> list[tuple[int, int]]:
        """Return all unoccupied cells in row-major order."""
        ys, xs = np.where(~self.occupancy(occupied))
        return list(zip(xs.tolist(), ys.tolist(), strict=True))
