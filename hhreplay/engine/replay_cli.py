"""
Command line front end for the hand replayer.

Usage:
    hhreplay timeline <file>
    hhreplay replay <file> [--index N] [--json] [--track-refunds]
    hhreplay stats <file>...
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .game_state import ReplayState, compute_replay_state
from .hand_parser import parse_hand, split_hands
from .hand_store import HandRecord
from .logger import PACKAGE_LOGGER, setup_logger
from .money import fmt_money
from .stats import calculate_stats


def _read_text(path: str) -> str:
    file = Path(path)
    if not file.is_file():
        raise FileNotFoundError(f"No such hand file: {path}")
    return file.read_text(encoding="utf-8")


def format_state(state: ReplayState) -> str:
    board = " ".join(state.board) or "-"
    lines = [
        f"Event {state.index}: {state.last_action}",
        f"Street: {state.street.value} | Pot: {fmt_money(state.pot)} | Board: [{board}]",
    ]
    lines.extend(f"  {p}" for p in state.players)
    if state.hero:
        lines.append(f"Hero {state.hero} facing {fmt_money(state.hero_facing_bet)}")
    lines.extend(f"WARNING: {w}" for w in state.warnings)
    return "\n".join(lines)


def cmd_timeline(args) -> None:
    hand = parse_hand(_read_text(args.file), track_refunds=args.track_refunds)
    for i, event in enumerate(hand.events):
        print(f"{i:3d}  {event}")


def cmd_replay(args) -> None:
    hand = parse_hand(_read_text(args.file), track_refunds=args.track_refunds)
    index = len(hand.events) - 1 if args.index is None else args.index
    state = compute_replay_state(hand.players, hand.events, index)
    if args.json:
        print(json.dumps(state.to_dict(), indent=2))
    else:
        print(format_state(state))


def cmd_stats(args) -> None:
    records = [
        HandRecord(raw_text=block, stakes=args.stakes)
        for path in args.files
        for block in split_hands(_read_text(path))
    ]
    print(f"{'Player':<20}{'Hands':>6}{'VPIP':>7}{'PFR':>7}{'AF':>6}{'WTSD':>7}{'Won':>12}{'bb/100':>9}  Style")
    for s in calculate_stats(records):
        print(f"{s.name:<20}{s.hands_played:>6}{s.vpip:>7.1f}{s.pfr:>7.1f}{s.af:>6.2f}"
              f"{s.wtsd:>7.1f}{fmt_money(s.winnings):>12}{s.bb_per_100:>9.1f}  {s.style}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hhreplay",
        description="Parse and replay poker hand histories",
    )
    parser.add_argument(
        "--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)"
    )
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    timeline_parser = subparsers.add_parser("timeline", help="List the parsed events of a hand")
    timeline_parser.add_argument("file", help="Path to a hand history text file")
    timeline_parser.add_argument(
        "--track-refunds", action="store_true", help="Keep uncalled-bet returns as events"
    )
    timeline_parser.set_defaults(func=cmd_timeline)

    replay_parser = subparsers.add_parser("replay", help="Show the table state at an event")
    replay_parser.add_argument("file", help="Path to a hand history text file")
    replay_parser.add_argument(
        "--index", "-i", type=int, default=None,
        help="Event index to replay through (default: last event, -1 for the start)"
    )
    replay_parser.add_argument("--json", action="store_true", help="Print the state as JSON")
    replay_parser.add_argument(
        "--track-refunds", action="store_true", help="Keep uncalled-bet returns as events"
    )
    replay_parser.set_defaults(func=cmd_replay)

    stats_parser = subparsers.add_parser("stats", help="Per-player statistics over hand files")
    stats_parser.add_argument("files", nargs="+", help="Hand history files (one or many hands each)")
    stats_parser.add_argument("--stakes", default="", help="Stakes label such as '$1/$2'")
    stats_parser.set_defaults(func=cmd_stats)

    return parser


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    setup_logger(PACKAGE_LOGGER, log_file=args.log_file, level=getattr(logging, args.log_level))

    try:
        args.func(args)
    except (FileNotFoundError, ValueError, IndexError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
