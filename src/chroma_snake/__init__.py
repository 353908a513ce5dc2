"""Chroma Snake — colour-shifting snake game engine."""

from chroma_snake.config import GameConfig
from chroma_snake.engine import GameEngine, GameState, advance, initial_state, turn
from chroma_snake.food import Food, FoodSpawner
from chroma_snake.grid import Grid
from chroma_snake.snake import Direction, Segment

__all__ = [
    "Direction",
    "Food",
    "FoodSpawner",
    "GameConfig",
    "GameEngine",
    "GameState",
    "Grid",
    "Segment",
    "advance",
    "initial_state",
    "turn",
]
