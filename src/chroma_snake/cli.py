"""CLI launcher for the Chroma Snake server."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from chroma_snake.config import GameConfig

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chroma-snake",
        description="Chroma Snake game server and configuration tools.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    # --- serve ---
    serve_p = sub.add_parser("serve", help="Run the game server.")
    serve_p.add_argument("--host", type=str, default="127.0.0.1")
    serve_p.add_argument("--port", type=int, default=8000)
    _add_config_flags(serve_p)

    # --- show-config ---
    show_p = sub.add_parser(
        "show-config", help="Print the effective configuration as JSON.",
    )
    _add_config_flags(show_p)

    return parser


def _add_config_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON config file (flags override its values).",
    )
    parser.add_argument("--grid-size", type=int, default=None)
    parser.add_argument("--tick-ms", type=int, default=None)
    parser.add_argument("--food-timeout-ms", type=int, default=None)
    parser.add_argument("--max-sessions", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)


def _resolve_config(args: argparse.Namespace) -> GameConfig:
    config = GameConfig.load(args.config) if args.config else GameConfig()

    overrides: dict = {}
    flag_map = {
        "grid_size": "grid_size",
        "tick_ms": "tick_interval_ms",
        "food_timeout_ms": "food_timeout_ms",
        "max_sessions": "max_sessions",
        "seed": "seed",
    }
    for cli_name, cfg_name in flag_map.items():
        val = getattr(args, cli_name, None)
        if val is not None:
            overrides[cfg_name] = val

    if overrides:
        d = config.to_dict()
        d.update(overrides)
        if "grid_size" in overrides and args.config is None:
            # Keep the default start cell centred on a resized board.
            size = overrides["grid_size"]
            d["initial_cell"] = [size // 2, size // 2]
        config = GameConfig.from_dict(d)
    return config


def _run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from chroma_snake.server.app import create_app

    config = _resolve_config(args)
    logger.info(
        "Serving on %s:%d (grid %d, tick %d ms).",
        args.host, args.port, config.grid_size, config.tick_interval_ms,
    )
    uvicorn.run(create_app(config), host=args.host, port=args.port)
    return 0


def _run_show_config(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    print(json.dumps(config.to_dict(), indent=2))  # noqa: T201
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``chroma-snake`` CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "serve": _run_serve,
        "show-config": _run_show_config,
    }
    try:
        return handlers[args.command](args)
    except (OSError, TypeError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
