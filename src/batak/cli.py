"""
Command-line interface for simulating Batak matches.

Usage examples (from project root, after installing in editable mode):

    python -m batak.cli simulate --rounds 5 --seed 1
    python -m batak.cli --verbose simulate --rounds 20 --stats-file south.json
    python -m batak.cli eval --matches 20 --rounds-per-match 3
"""
from __future__ import annotations

import argparse
import logging
import random
from pathlib import Path
from typing import Optional

from .agents import RandomAgent
from .bidding import bid_label
from .deal import Seat
from .env_game import BatakEnv, StepResult
from .game import RoundSummary, run_match
from .persistence import stats_from_json, stats_to_json
from .stats import PlayerStats, record_round


def format_summary(index: int, summary: RoundSummary) -> str:
    trump = summary.trump.name.title() if summary.trump is not None else "-"
    bid = bid_label(summary.bid)
    if summary.forced:
        bid += " (forced)"
    return (
        f"[round {index}] bidder={summary.bidder.label} bid={bid} trump={trump} "
        f"tricks={'/'.join(str(t) for t in summary.tricks)} "
        f"result={summary.result_label!r} us={summary.us_score:+d} them={summary.them_score:+d}"
    )


def _add_simulate_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "simulate",
        help="Play a match with four heuristic players and print every round.",
    )
    parser.add_argument(
        "--rounds",
        type=int,
        default=5,
        help="Number of rounds in the match.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for the shuffles.",
    )
    parser.add_argument(
        "--dealer",
        choices=[s.label for s in Seat],
        default=Seat.EAST.label,
        help="Dealer of the first round.",
    )
    parser.add_argument(
        "--stats-file",
        type=str,
        default=None,
        help="JSON file with south's statistics; read if present, updated after the match.",
    )
    parser.set_defaults(func=_cmd_simulate)


def _cmd_simulate(args: argparse.Namespace) -> None:
    if args.rounds <= 0:
        raise SystemExit("--rounds must be positive")
    rng = random.Random(args.seed)
    dealer = Seat[args.dealer.upper()]
    (us, them), summaries = run_match(args.rounds, rng=rng, dealer=dealer)

    for i, summary in enumerate(summaries, start=1):
        print(format_summary(i, summary))
    print(f"Match totals: us={us} them={them}")

    if args.stats_file:
        path = Path(args.stats_file)
        stats = stats_from_json(path.read_text(encoding="utf-8")) if path.exists() else PlayerStats()
        for summary in summaries:
            record_round(stats, summary, Seat.SOUTH)
        path.write_text(stats_to_json(stats), encoding="utf-8")
        print(
            f"South: games={stats.total_games} wins={stats.wins} sweeps={stats.sweep_count} "
            f"points={stats.total_points} league={stats.league.value}"
        )


def _add_eval_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "eval",
        help="Play a random baseline in south's seat against heuristic players.",
    )
    parser.add_argument(
        "--matches",
        type=int,
        default=10,
        help="Number of matches to play.",
    )
    parser.add_argument(
        "--rounds-per-match",
        type=int,
        default=5,
        help="Number of rounds per match.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed for the shuffles and the baseline.",
    )
    parser.set_defaults(func=_cmd_eval)


def _cmd_eval(args: argparse.Namespace) -> None:
    if args.matches <= 0:
        raise SystemExit("--matches must be positive")
    if args.rounds_per_match <= 0:
        raise SystemExit("--rounds-per-match must be positive")
    policy = RandomAgent(seed=args.seed)
    env = BatakEnv(
        num_rounds=args.rounds_per_match,
        learning_seat=Seat.SOUTH,
        rng=random.Random(args.seed),
    )
    total = 0.0
    for m in range(1, args.matches + 1):
        step: StepResult = env.reset()
        while not step.done:
            step = env.step(policy.act(step.obs, step.legal_actions_mask))
        total += step.reward
        print(f"[match {m}/{args.matches}] totals={step.info['totals']} reward={step.reward:+.0f}")
    print(f"Average team score for south: {total / args.matches:.2f}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="batak", description="Batak simulation CLI.")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log engine events (rounds, rejected actions) to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_simulate_parser(subparsers)
    _add_eval_parser(subparsers)
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
