"""
Kashte CLI - Command-line interface for the engine.

Usage:
    kashte simulate [--players N] [--seed S] [--games G] [--max-steps M]
        Play AI-only games and print the results
    kashte serve [--host H] [--port P]
        Serve the HTTP API with uvicorn

Global option --log-level sets the level of the root logger.
"""

import argparse
import logging
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Kashte - Card-driven race board game engine",
        prog="kashte",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic log level",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play AI-only games")
    simulate_parser.add_argument("--players", type=int, default=4, help="Players per game (2-4)")
    simulate_parser.add_argument("--seed", type=int, default=0, help="Seed of the first game")
    simulate_parser.add_argument("--games", type=int, default=1, help="Number of games")
    simulate_parser.add_argument(
        "--max-steps", type=int, default=5000, help="Action limit per game",
    )

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Serve the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        return 1


def cmd_simulate(args):
    """Play AI-only games with the simple bot in every seat."""
    from .session import SessionManager, GameLoop, LoopState

    if not 2 <= args.players <= 4:
        print(f"Error: --players must be 2-4, got {args.players}")
        return 1

    manager = SessionManager()
    wins: dict[str, int] = {}
    unfinished = 0

    for game in range(args.games):
        seed = args.seed + game
        session = manager.create_session(player_count=args.players, seed=seed, ai_only=True)
        result = GameLoop(session, max_steps=args.max_steps).run_ai_turns()

        state = session.game_state
        if result.loop_state == LoopState.GAME_OVER and state.winner:
            winner = state.get_player(state.winner)
            label = f"{winner.name} ({winner.color.value})"
            wins[label] = wins.get(label, 0) + 1
            print(f"Game {game + 1} (seed {seed}): {label} won on turn {state.turn_number}")
        else:
            unfinished += 1
            reason = "; ".join(result.errors) or f"no winner after {result.steps} steps"
            print(f"Game {game + 1} (seed {seed}): {reason}")

        manager.end_session(session.session_id)

    if args.games > 1:
        print("\nWins:")
        for label, count in sorted(wins.items(), key=lambda kv: -kv[1]):
            print(f"  {label}: {count}")
        if unfinished:
            print(f"  unfinished: {unfinished}")
    return 0


def cmd_serve(args):
    """Serve the HTTP API."""
    import uvicorn
    from .api import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
