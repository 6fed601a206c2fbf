"""
War-Lanes CLI - Command-line entry point.

Usage:
    warlanes simulate [--games N] [--seed S] [--p1 planner|random] [--p2 planner|random]

Runs AI-vs-AI matches through the game loop and prints each result.
"""

import argparse
import logging
import random
import sys

from .bots import PriorityPlanner, RandomPolicy
from .config import rules_from_env
from .engine_core.reducer import Reducer
from .session import GameLoop


POLICIES = {
    "planner": lambda seed, rules: PriorityPlanner(rules=rules),
    "random": lambda seed, rules: RandomPolicy(seed=seed, rules=rules),
}


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="War-Lanes Poker rules engine",
        prog="warlanes",
    )
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    simulate_parser = subparsers.add_parser("simulate", help="Run AI-vs-AI matches")
    simulate_parser.add_argument("--games", type=int, default=1, help="Number of matches")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    simulate_parser.add_argument("--p1", choices=sorted(POLICIES), default="planner")
    simulate_parser.add_argument("--p2", choices=sorted(POLICIES), default="planner")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        cmd_simulate(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_simulate(args):
    """Play matches and print a summary."""
    rules = rules_from_env()
    seeder = random.Random(args.seed)
    wins = {1: 0, 2: 0}
    names = {1: args.p1, 2: args.p2}

    for game in range(1, args.games + 1):
        seed = seeder.randrange(2**32)
        loop = GameLoop(
            reducer=Reducer(rng=random.Random(seed), rules=rules),
            seats={
                1: POLICIES[args.p1](seed, rules),
                2: POLICIES[args.p2](seed + 1, rules),
            },
        )
        names = {seat: policy.get_name() for seat, policy in loop.seats.items()}
        state = loop.play_out()
        if state.winner is None:
            print(f"Game {game}: unfinished after {len(loop.history)} actions (phase {state.phase.value})")
            continue
        wins[state.winner] += 1
        print(
            f"Game {game}: player {state.winner} wins in round {state.round_number} "
            f"(hp {state.player1.hp} / {state.player2.hp}, {len(loop.history)} actions)"
        )

    print(f"\nPlayer 1 ({names[1]}): {wins[1]}  Player 2 ({names[2]}): {wins[2]}")


if __name__ == "__main__":
    main()
