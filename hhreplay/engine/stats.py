"""
Hand statistics over stored hand histories.

Every number here comes from replaying the parsed timeline, so stats and
the replayer always agree on who put in what. Money stays in cents;
big-blind figures are floats.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable

import numpy as np

from .enums import ActionType, EventKind, Street
from .game_state import compute_replay_state
from .hand_parser import ParsedHand, parse_hand
from .hand_store import HandRecord
from .logger import get_logger
from .money import Cents, parse_amounts
from .player import Position, position_for_seat

logger = get_logger(__name__)

RANK_ORDER = "23456789TJQKA"
DEFAULT_BIG_BLIND: Cents = 100
DEFAULT_SESSION_GAP = timedelta(minutes=60)
MIN_SESSION_MINUTES = 2.0


def hole_cards_key(cards) -> str | None:
    """
    Collapse two hole cards into their starting-hand class.

    Example: ["Ah", "Ks"] -> "AKo", ["7c", "7d"] -> "77", ["Td", "9d"] -> "T9s"
    """
    if not cards or len(cards) != 2:
        return None
    parsed = []
    for card in cards:
        rank, suit = card[:-1].upper(), card[-1:].lower()
        if rank == "10":
            rank = "T"
        if rank not in RANK_ORDER or not suit:
            return None
        parsed.append((rank, suit))
    (r1, s1), (r2, s2) = sorted(parsed, key=lambda c: RANK_ORDER.index(c[0]), reverse=True)
    if r1 == r2:
        return f"{r1}{r2}"
    return f"{r1}{r2}{'s' if s1 == s2 else 'o'}"


def big_blind_for(hand: ParsedHand, stakes: str = "") -> Cents:
    """Big blind posted in the hand, else the second stake amount, else a default."""
    posted = next((e.amount for e in hand.events if e.action == ActionType.BIG_BLIND and e.amount), None)
    if posted:
        return posted
    amounts = parse_amounts(stakes)
    if len(amounts) >= 2 and amounts[1] > 0:
        return amounts[1]
    return DEFAULT_BIG_BLIND


def final_nets(hand: ParsedHand) -> dict[str, Cents]:
    """Net chip result per player after the whole timeline."""
    state = compute_replay_state(hand.players, hand.events, len(hand.events) - 1)
    nets: dict[str, Cents] = {}
    for p in state.players:
        nets.setdefault(p.name, p.current_stack - p.initial_stack)
    return nets


@dataclass(frozen=True)
class HeroHandDetails:
    hero_cards: tuple[str, ...]
    net_win: Cents
    position: Position


def hero_hand_details(record: HandRecord) -> HeroHandDetails:
    """Hero's cards, result and position for one stored hand."""
    hand = parse_hand(record.raw_text, track_refunds=True)
    hero = hand.player(record.hero) if record.hero else None
    hero = hero or hand.hero
    if hero is None:
        return HeroHandDetails(hero_cards=(), net_win=0, position=Position.MP)

    button_seat = hand.dealer.seat if hand.dealer else 1
    return HeroHandDetails(
        hero_cards=tuple(hero.hole_cards or ()),
        net_win=final_nets(hand).get(hero.name, 0),
        position=position_for_seat(hero.seat, button_seat),
    )


@dataclass
class PlayerStats:
    name: str
    hands_played: int = 0
    vpip: float = 0.0
    pfr: float = 0.0
    af: float = 0.0
    afq: float = 0.0
    three_bets: int = 0
    cbet_flop: int = 0
    wtsd: float = 0.0
    wmsd: float = 0.0
    winnings: Cents = 0
    bb_per_100: float = 0.0
    std_dev_bb: float = 0.0
    style: str = "Unknown"
    position_counts: dict[str, int] = field(default_factory=dict)

    # Raw counters, turned into percentages by finalize()
    vpip_hands: int = 0
    pfr_hands: int = 0
    bets: int = 0
    raises: int = 0
    calls: int = 0
    folds: int = 0
    showdowns: int = 0
    showdowns_won: int = 0
    results_bb: list[float] = field(default_factory=list)

    def finalize(self) -> "PlayerStats":
        hands = self.hands_played or 1
        self.vpip = self.vpip_hands / hands * 100
        self.pfr = self.pfr_hands / hands * 100
        aggressive = self.bets + self.raises
        self.af = aggressive / self.calls if self.calls else float(aggressive)
        total = aggressive + self.calls + self.folds
        self.afq = aggressive / total * 100 if total else 0.0
        self.wtsd = self.showdowns / hands * 100
        self.wmsd = self.showdowns_won / self.showdowns * 100 if self.showdowns else 0.0
        self.bb_per_100 = float(np.sum(self.results_bb)) / hands * 100 if self.results_bb else 0.0
        self.std_dev_bb = float(np.std(self.results_bb, ddof=1)) if len(self.results_bb) >= 2 else 0.0
        self.style = determine_style(self.vpip, self.pfr, self.af)
        return self


def determine_style(vpip: float, pfr: float, af: float) -> str:
    if vpip < 15 and pfr < 10:
        return "Nit"
    if vpip < 22 and pfr >= 15 and af >= 2:
        return "TAG"
    # Maniac is a narrower LAG, so it is checked first
    if vpip > 50 and pfr > 30 and af > 3:
        return "Maniac"
    if vpip >= 25 and pfr >= 20 and af >= 2.5:
        return "LAG"
    if vpip > 40 and pfr < 10 and af < 1.5:
        return "Station"
    if vpip < 25 and pfr < 15:
        return "Rock"
    return "Unknown"


def _showdown_players(hand: ParsedHand) -> set[str]:
    idx = next((i for i, e in enumerate(hand.events) if e.kind == EventKind.SHOWDOWN), None)
    if idx is None:
        return set()
    state = compute_replay_state(hand.players, hand.events, idx)
    return {p.name for p in state.players if p.is_active}


def _accumulate(hand: ParsedHand, stakes: str, table: dict[str, PlayerStats]) -> None:
    big_blind = big_blind_for(hand, stakes)
    button_seat = hand.dealer.seat if hand.dealer else 1
    at_showdown = _showdown_players(hand)
    nets = final_nets(hand)

    seen: set[str] = set()
    for player in hand.players:
        if player.name in seen:
            continue
        seen.add(player.name)
        stats = table.setdefault(player.name, PlayerStats(name=player.name))
        stats.hands_played += 1
        pos = position_for_seat(player.seat, button_seat).value
        stats.position_counts[pos] = stats.position_counts.get(pos, 0) + 1

        net = nets.get(player.name, 0)
        stats.winnings += net
        stats.results_bb.append(net / big_blind)
        if player.name in at_showdown:
            stats.showdowns += 1
            if net > 0:
                stats.showdowns_won += 1

    voluntary: set[str] = set()
    raisers: set[str] = set()
    preflop_raises = 0
    aggressor = None
    for event in hand.events:
        stats = table.get(event.player) if event.player else None
        if event.kind != EventKind.ACTION or stats is None:
            continue
        action = event.action
        if action == ActionType.FOLD:
            stats.folds += 1
        elif action == ActionType.CALL:
            stats.calls += 1
        elif action == ActionType.BET:
            stats.bets += 1
        elif action == ActionType.RAISE:
            stats.raises += 1

        if event.street == Street.PREFLOP:
            if action in (ActionType.CALL, ActionType.BET, ActionType.RAISE):
                voluntary.add(event.player)
            if action == ActionType.RAISE:
                raisers.add(event.player)
                preflop_raises += 1
                aggressor = event.player
                if preflop_raises >= 2:
                    stats.three_bets += 1
        elif event.street == Street.FLOP and action == ActionType.BET:
            if event.player == aggressor:
                stats.cbet_flop += 1
            aggressor = event.player

    for name in voluntary:
        table[name].vpip_hands += 1
    for name in raisers:
        table[name].pfr_hands += 1


def calculate_stats(records: Iterable[HandRecord]) -> list[PlayerStats]:
    """Per-player statistics across hands, most hands played first."""
    table: dict[str, PlayerStats] = {}
    for record in records:
        hand = parse_hand(record.raw_text, track_refunds=True)
        if not hand.players:
            logger.debug(f"Hand {record.id} has no seated players; skipped")
            continue
        _accumulate(hand, record.stakes, table)
    return sorted((s.finalize() for s in table.values()), key=lambda s: s.hands_played, reverse=True)


@dataclass(frozen=True)
class Session:
    start_time: datetime
    end_time: datetime
    duration_minutes: float
    hands_played: int
    net_won: Cents
    hourly_rate: float
    most_played_stakes: str
    hand_ids: tuple[str, ...]


def _session_from(records: list[HandRecord]) -> Session:
    start, end = records[0].timestamp, records[-1].timestamp
    minutes = max((end - start).total_seconds() / 60, MIN_SESSION_MINUTES)
    net = sum(hero_hand_details(r).net_win for r in records)

    stake_counts: dict[str, int] = {}
    for r in records:
        stakes = r.stakes or "Unknown"
        stake_counts[stakes] = stake_counts.get(stakes, 0) + 1
    # First seen wins ties
    most_played = max(stake_counts, key=stake_counts.get)

    return Session(
        start_time=start,
        end_time=end,
        duration_minutes=minutes,
        hands_played=len(records),
        net_won=net,
        hourly_rate=net / minutes * 60,
        most_played_stakes=most_played,
        hand_ids=tuple(r.id for r in records),
    )


def calculate_sessions(records: Iterable[HandRecord], gap: timedelta = DEFAULT_SESSION_GAP) -> list[Session]:
    """Group hands into sessions split by idle gaps, newest session first."""
    ordered = sorted(records, key=lambda r: r.timestamp)
    if not ordered:
        return []

    sessions = []
    current = [ordered[0]]
    for prev, curr in zip(ordered, ordered[1:]):
        if curr.timestamp - prev.timestamp > gap:
            sessions.append(_session_from(current))
            current = [curr]
        else:
            current.append(curr)
    sessions.append(_session_from(current))
    return sorted(sessions, key=lambda s: s.start_time, reverse=True)
