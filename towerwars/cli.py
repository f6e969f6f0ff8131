"""
Tower Wars CLI - Command-line interface for the engine.

Usage:
    towerwars serve [--host HOST] [--port PORT]    Run the game server
    towerwars simulate [--players N] [--seed S]    Play a bot-only game
"""

import argparse
import logging
import os
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Tower Wars - Multiplayer tower card battle",
        prog="towerwars",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the socket.io game server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    serve_parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "3000")), help="Port")

    # Simulate command
    sim_parser = subparsers.add_parser("simulate", help="Play a full game with random bots")
    sim_parser.add_argument("--players", type=int, default=2, help="Number of bots (2-4)")
    sim_parser.add_argument("--seed", type=int, default=None, help="Seed for deck and bots")
    sim_parser.add_argument("--pacts", action="store_true", help="Enable pacts")
    sim_parser.add_argument("--breach", choices=["block", "penalty"], default="block", help="Pact breach policy")
    sim_parser.add_argument("--max-turns", type=int, default=500, help="Stop after this many turns")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=os.getenv("TOWERWARS_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the ASGI app with uvicorn."""
    import uvicorn
    from .api import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)


def cmd_simulate(args):
    """Play a bot-only game and print the narration."""
    from .bots import RandomPolicy
    from .engine_core import GamePhase, PactBreach, apply_action, legal_actions, setup_game

    players = [(f"bot_{i + 1}", f"Bot {i + 1}") for i in range(args.players)]
    try:
        state = setup_game(
            players,
            pact_enabled=args.pacts,
            pact_breach=PactBreach(args.breach),
            random_seed=args.seed,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    bot = RandomPolicy(seed=args.seed)
    _print_entries(state.log)
    last_entry = state.log[-1]
    while state.phase == GamePhase.ACTION and state.turn_number <= args.max_turns:
        decision = bot.select_action(state, legal_actions(state))
        result = apply_action(state, decision.action)
        if not result.success:
            print(f"Error: bot chose an illegal action: {result.error}")
            sys.exit(1)
        last_entry = _print_entries(state.log, after=last_entry)

    if state.phase == GamePhase.ENDED:
        winner = state.winner
        print(f"\nWinner: {winner.name if winner else 'nobody'} after {state.turn_number} turns")
    else:
        print(f"\nNo winner after {args.max_turns} turns")


def _print_entries(log, after=None):
    """Print the log entries newer than `after` (the log is trimmed from the front)."""
    start = 0
    if after is not None:
        for idx in range(len(log) - 1, -1, -1):
            if log[idx] is after:
                start = idx + 1
                break
    for entry in log[start:]:
        print(entry.message)
    return log[-1] if log else after


if __name__ == "__main__":
    main()
