"""Game configuration."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameConfig:
    """Tunable game parameters.

    Supports JSON serialization so a server can be started from a file.
    """

    # Board
    grid_size: int = 20
    initial_cell: tuple[int, int] = (10, 10)
    initial_color: str = "#4CAF50"

    # Timing (milliseconds)
    tick_interval_ms: int = 150
    food_timeout_ms: int = 5000

    # Food placement
    food_sample_attempts: int = 64
    seed: int | None = None

    # Server
    max_sessions: int = 100

    def __post_init__(self) -> None:
        if self.grid_size < 4:
            raise ValueError("grid_size must be at least 4.")
        x, y = self.initial_cell
        if not (0 <= x < self.grid_size and 0 <= y < self.grid_size):
            raise ValueError("initial_cell must lie inside the grid.")
        if self.tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be positive.")
        if self.food_timeout_ms < 0:
            raise ValueError("food_timeout_ms must be >= 0.")
        if self.food_sample_attempts < 1:
            raise ValueError("food_sample_attempts must be at least 1.")
        if self.max_sessions < 1:
            raise ValueError("max_sessions must be at least 1.")

    def to_dict(self) -> dict:
        """Serialize to a plain dict (tuples become lists)."""
        d = asdict(self)
        d["initial_cell"] = list(self.initial_cell)
        return d

    def save(self, path: str | Path) -> None:
        """Write config to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Config saved to %s", p)

    @classmethod
    def from_dict(cls, raw: dict) -> GameConfig:
        """Build a config from a plain dict, rejecting unknown keys."""
        unknown = set(raw) - {f.name for f in fields(cls)}
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}.")
        data = dict(raw)
        if "initial_cell" in data:
            data["initial_cell"] = tuple(data["initial_cell"])
        return cls(**data)

    @classmethod
    def load(cls, path: str | Path) -> GameConfig:
        """Load config from a JSON file."""
        return cls.from_dict(json.loads(Path(path).read_text()))
