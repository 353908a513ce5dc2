"""Tick-based game engine built on immutable state snapshots."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, replace

import numpy as np

from chroma_snake.config import GameConfig
from chroma_snake.controls import direction_for_key
from chroma_snake.food import Food, FoodSpawner
from chroma_snake.grid import Grid
from chroma_snake.snake import (
    Body,
    Direction,
    Segment,
    grow,
    is_reversal,
    next_head,
    occupies,
    slide,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Default engine clock, in milliseconds."""
    return time.monotonic() * 1000.0


@dataclass(frozen=True)
class GameState:
    """Complete game state at one instant.

    Never mutated; every transition returns a new instance.
    ``last_food_time`` and ``ended_at`` are in milliseconds on the engine
    clock; ``ended_at`` is set on the tick that ends the game.
    """

    snake: Body
    food: Food | None
    direction: Direction
    game_over: bool
    last_food_time: float
    tick: int = 0
    ended_at: float | None = None

    @property
    def head(self) -> Segment:
        return self.snake[0]

    @property
    def score(self) -> int:
        return len(self.snake) - 1

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "tick": self.tick,
            "score": self.score,
            "game_over": self.game_over,
            "direction": self.direction.name,
            "snake": [seg.to_dict() for seg in self.snake],
            "food": self.food.to_dict() if self.food is not None else None,
            "last_food_time": self.last_food_time,
            "ended_at": self.ended_at,
        }


def initial_state(
    config: GameConfig, spawner: FoodSpawner, now: float,
) -> GameState:
    """Build the start-of-game state: one segment heading right."""
    x, y = config.initial_cell
    snake: Body = (Segment(x, y, config.initial_color),)
    return GameState(
        snake=snake,
        food=spawner.spawn(snake),
        direction=Direction.RIGHT,
        game_over=False,
        last_food_time=now,
    )


def turn(state: GameState, direction: Direction) -> GameState:
    """Return *state* heading in *direction*, unless that is a reversal."""
    if direction is state.direction or is_reversal(state.direction, direction):
        return state
    return replace(state, direction=direction)


def advance(
    state: GameState,
    now: float,
    spawner: FoodSpawner,
    food_timeout_ms: float,
) -> GameState:
    """Advance the game by one tick.

    Returns *state* itself once the game is over.
    """
    if state.game_over:
        return state

    cell = next_head(state.snake, state.direction)

    # --- wall and self collision ---
    # The current tail counts as an obstacle even though it would move away.
    if not spawner.grid.in_bounds(*cell) or occupies(state.snake, cell):
        return replace(
            state, game_over=True, ended_at=now, tick=state.tick + 1,
        )

    food = state.food
    if food is not None and cell == food.cell:
        snake = grow(state.snake, cell, food.color)
        return replace(
            state,
            snake=snake,
            food=spawner.spawn(snake),
            last_food_time=now,
            tick=state.tick + 1,
        )

    snake = slide(state.snake, cell)
    last_food_time = state.last_food_time
    if now - last_food_time >= food_timeout_ms and len(snake) > 1:
        snake = snake[:-1]
        last_food_time = now
    return replace(
        state, snake=snake, last_food_time=last_food_time, tick=state.tick + 1,
    )


class GameEngine:
    """Single-snake game engine.

    Holds the current :class:`GameState` and replaces it wholesale on
    every :meth:`tick`, direction change, and :meth:`reset`. The clock and
    RNG are injectable for deterministic tests.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        clock: Clock | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config if config is not None else GameConfig()
        self.clock = clock if clock is not None else monotonic_ms
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.grid = Grid(self.config.grid_size)
        self.spawner = FoodSpawner(
            self.grid, rng=self.rng, max_attempts=self.config.food_sample_attempts,
        )
        self.state = initial_state(self.config, self.spawner, self.clock())

    @property
    def game_over(self) -> bool:
        return self.state.game_over

    @property
    def score(self) -> int:
        return self.state.score

    def set_direction(self, direction: Direction) -> bool:
        """Change heading, ignoring 180° reversals.

        Returns True if the direction changed.
        """
        new_state = turn(self.state, direction)
        changed = new_state is not self.state
        self.state = new_state
        return changed

    def handle_key(self, key: str) -> bool:
        """Steer from a key name; keys without a binding are ignored."""
        direction = direction_for_key(key)
        if direction is None:
            return False
        return self.set_direction(direction)

    def tick(self) -> GameState:
        """Advance one step and return the new state."""
        previous = self.state
        self.state = advance(
            previous, self.clock(), self.spawner, self.config.food_timeout_ms,
        )
        if self.state.game_over and not previous.game_over:
            logger.info(
                "Game over at tick %d with score %d.",
                self.state.tick, self.state.score,
            )
        elif len(self.state.snake) < len(previous.snake):
            logger.debug("Food timeout: snake shrank to %d.", len(self.state.snake))
        return self.state

    def reset(self) -> GameState:
        """Start a fresh game."""
        self.state = initial_state(self.config, self.spawner, self.clock())
        logger.info("Game reset.")
        return self.state

    def get_state(self) -> dict:
        """Return the current state as a serializable dict."""
        return self.state.to_dict()
