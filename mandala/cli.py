"""
Mandala CLI - Command-line interface for the engine.

Usage:
    mandala serve [--host H] [--port P]          Run the room server
    mandala simulate [--games N] [--seed S]      Play bot-vs-bot games
"""

import argparse
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Mandala - Two-player card game engine",
        prog="mandala",
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the room server")
    serve_parser.add_argument("--host", default=None, help="Bind address (default MANDALA_HOST or 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default MANDALA_PORT or 3000)")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play bot-vs-bot games")
    simulate_parser.add_argument("--games", type=int, default=1, help="Number of games")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Seed for the first game")
    simulate_parser.add_argument(
        "--policy",
        choices=["random", "first"],
        default="random",
        help="Policy for both seats",
    )

    args = parser.parse_args(argv)

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the FastAPI room server under uvicorn."""
    import uvicorn

    from .api.app import create_app
    from .config import Settings
    from .logging_config import setup_logging

    settings = Settings.from_env()
    setup_logging(args.log_level or settings.log_level, settings.environment)

    uvicorn.run(
        create_app(settings=settings),
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_config=None,
    )


def cmd_simulate(args):
    """Play bot games and print one line per game."""
    from .bots import FirstLegalPolicy, RandomPolicy, play_game
    from .logging_config import setup_logging

    setup_logging(args.log_level or "WARNING")

    wins = [0, 0]
    stalled = 0
    for game in range(args.games):
        seed = None if args.seed is None else args.seed + game
        if args.policy == "first":
            policies = (FirstLegalPolicy(), FirstLegalPolicy())
        else:
            policies = (RandomPolicy(seed=seed), RandomPolicy(seed=None if seed is None else seed + 1))

        record = play_game(policies, seed=seed)
        state = record.final_state

        if record.winner is None:
            stalled += 1
            print(f"Game {game + 1}: unfinished after {len(record.actions)} actions")
            continue

        wins[record.winner.winner_index] += 1
        tie = f" (tie broken by {record.winner.tie_break})" if record.winner.tie_break else ""
        trigger = state.end_game_trigger.value if state.end_game_trigger else "?"
        print(
            f"Game {game + 1}: {record.winner.winner_id} wins "
            f"{record.winner.scores[0]}-{record.winner.scores[1]}{tie}, "
            f"{len(record.actions)} actions, ended by {trigger}"
        )

    if args.games > 1:
        print(f"\nSeat 0 wins: {wins[0]}  Seat 1 wins: {wins[1]}  Unfinished: {stalled}")


if __name__ == "__main__":
    main()
