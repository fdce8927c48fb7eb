"""
Replay state reducer.

compute_replay_state() rebuilds the table from the roster and the first
index + 1 timeline events. Every call starts from fresh copies and reads
nothing but its arguments, so any index can be requested in any order.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from .enums import ActionType, EventKind, Street
from .events import HandEvent
from .logger import format_money_for_logging, get_logger
from .money import Cents, from_cents
from .player import Player, PlayerSnapshot

logger = get_logger(__name__)

INITIAL_DESCRIPTION = "Hand Started"

# Reducer labels for chip-neutral and chip-committing actions
ACTION_LABELS = {
    ActionType.FOLD: "Fold",
    ActionType.CHECK: "Check",
    ActionType.CALL: "Call",
    ActionType.BET: "Bet",
    ActionType.RAISE: "Raise",
    ActionType.WIN: "Win",
    ActionType.UNCALLED: "Uncalled",
}


@dataclass(frozen=True)
class ReplayState:
    """Table state after replaying the timeline through `index`."""
    index: int
    street: Street
    pot: Cents
    board: tuple[str, ...]
    players: tuple[PlayerSnapshot, ...]
    current_bet: Cents = 0
    hero: str | None = None
    hero_facing_bet: Cents = 0
    last_action: str = INITIAL_DESCRIPTION
    last_actor: str | None = None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def player(self, name: str) -> PlayerSnapshot | None:
        return next((p for p in self.players if p.name == name), None)

    def total_chips(self) -> Cents:
        """Stacks + bets in front + pot; constant across a hand."""
        return self.pot + sum(p.current_stack + p.bet for p in self.players)

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "street": self.street.value,
            "pot": from_cents(self.pot),
            "board": list(self.board),
            "players": [p.to_dict() for p in self.players],
            "current_bet": from_cents(self.current_bet),
            "hero": self.hero,
            "hero_facing_bet": from_cents(self.hero_facing_bet),
            "last_action": self.last_action,
            "last_actor": self.last_actor,
            "warnings": list(self.warnings),
        }


class _Table:
    """Mutable scratch table owned by a single compute_replay_state call."""

    def __init__(self, players: Iterable[Player]):
        self.seats: list[dict[str, Any]] = [
            {
                "seat": p.seat,
                "name": p.name,
                "initial_stack": p.initial_stack,
                "current_stack": p.initial_stack,
                "bet": 0,
                "is_active": True,
                "is_dealer": p.is_dealer,
                "hole_cards": tuple(p.hole_cards) if p.hole_cards else None,
                "action": "",
            }
            for p in players
        ]
        self.pot: Cents = 0
        self.board: list[str] = []
        self.street = Street.PREFLOP
        self.current_bet: Cents = 0
        self.resolved = False
        self.last_action = INITIAL_DESCRIPTION
        self.last_actor: str | None = None
        self.warnings: list[str] = []

    def find(self, name: str | None) -> dict[str, Any] | None:
        # First seat wins when a name is duplicated
        return next((s for s in self.seats if s["name"] == name), None)

    def sweep_bets(self, clear_labels: bool = True) -> None:
        for seat in self.seats:
            self.pot += seat["bet"]
            seat["bet"] = 0
            if clear_labels:
                seat["action"] = ""
        self.current_bet = 0

    def commit(self, seat: dict[str, Any], cost: Cents, index: int) -> None:
        self.debit(seat, cost, index)
        seat["bet"] += cost

    def debit(self, seat: dict[str, Any], cost: Cents, index: int) -> None:
        seat["current_stack"] -= cost
        if seat["current_stack"] < 0:
            self.warn(f"{seat['name']} overdrawn to "
                      f"{format_money_for_logging(seat['current_stack'])} at event {index}")

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def apply(self, event: HandEvent, index: int) -> None:
        if event.kind == EventKind.STREET:
            self.sweep_bets()
            self.board.extend(event.cards)
            self.street = event.street or self.street
            self.last_action = event.description
            return

        if event.kind == EventKind.SHOWDOWN:
            self.sweep_bets()
            self.street = Street.SHOWDOWN
            self.last_action = event.description
            return

        seat = self.find(event.player)
        if seat is None:
            logger.debug(f"Event {index} references unknown player {event.player!r}; ignored")
            return

        self.last_actor = seat["name"]
        if event.kind == EventKind.BLIND:
            self._apply_blind(seat, event, index)
        elif event.kind == EventKind.ACTION:
            self._apply_action(seat, event, index)
        elif event.kind == EventKind.SUMMARY:
            self._apply_win(seat, event, index)
        elif event.kind == EventKind.REFUND:
            self._apply_refund(seat, event)
        self.last_action = (f"{seat['name']} posts {event.description}"
                            if event.kind == EventKind.BLIND else event.description)

    def _apply_blind(self, seat: dict[str, Any], event: HandEvent, index: int) -> None:
        if event.action == ActionType.ANTE:
            # Dead money: straight into the pot, never in front
            self.debit(seat, event.amount, index)
            self.pot += event.amount
            seat["action"] = event.description
            return
        self.commit(seat, event.amount, index)
        self.current_bet = max(self.current_bet, seat["bet"])
        seat["action"] = event.description

    def _apply_action(self, seat: dict[str, Any], event: HandEvent, index: int) -> None:
        action = event.action
        if action == ActionType.FOLD:
            seat["is_active"] = False
        elif action == ActionType.CALL:
            self.commit(seat, event.amount, index)
        elif action == ActionType.BET:
            self.commit(seat, event.amount, index)
            self.current_bet = max(self.current_bet, seat["bet"])
        elif action == ActionType.RAISE:
            if event.amount <= self.current_bet:
                # "raises all-in" and similar lines carry no usable total
                self.warn(f"{seat['name']} raise to {format_money_for_logging(event.amount)} "
                          f"does not exceed {format_money_for_logging(self.current_bet)} "
                          f"at event {index}; no chips moved")
                seat["action"] = ACTION_LABELS[action]
                return
            # Amount is the new total in front; only the difference is paid
            self.commit(seat, event.amount - seat["bet"], index)
            self.current_bet = max(self.current_bet, seat["bet"])
        elif action != ActionType.CHECK:
            return
        seat["action"] = ACTION_LABELS[action]

    def _apply_win(self, seat: dict[str, Any], event: HandEvent, index: int) -> None:
        self.sweep_bets(clear_labels=False)
        if event.amount > self.pot:
            self.warn(f"{seat['name']} collected {format_money_for_logging(event.amount)} "
                      f"from a {format_money_for_logging(self.pot)} pot at event {index}")
        self.pot -= event.amount
        seat["current_stack"] += event.amount
        seat["action"] = ACTION_LABELS[ActionType.WIN]
        self.resolved = True

    def _apply_refund(self, seat: dict[str, Any], event: HandEvent) -> None:
        from_bet = min(event.amount, seat["bet"])
        seat["bet"] -= from_bet
        self.pot -= event.amount - from_bet
        seat["current_stack"] += event.amount
        self.current_bet = max((s["bet"] for s in self.seats), default=0)
        seat["action"] = ACTION_LABELS[ActionType.UNCALLED]

    def snapshot(self, index: int) -> ReplayState:
        players = tuple(PlayerSnapshot(**seat) for seat in self.seats)
        hero = next((p for p in players if p.hole_cards and p.is_active), None)
        facing = 0
        if hero and not self.resolved and self.street != Street.SHOWDOWN:
            facing = max(0, self.current_bet - hero.bet)
        return ReplayState(
            index=index,
            street=self.street,
            pot=self.pot,
            board=tuple(self.board),
            players=players,
            current_bet=self.current_bet,
            hero=hero.name if hero else None,
            hero_facing_bet=facing,
            last_action=self.last_action,
            last_actor=self.last_actor,
            warnings=tuple(self.warnings),
        )


def compute_replay_state(
    players: Sequence[Player],
    events: Sequence[HandEvent],
    index: int,
) -> ReplayState:
    """
    Replay events[0..index] on top of the initial roster.

    Args:
        players: Roster from the parser (never modified)
        events: Parsed timeline (never modified)
        index: Last event to apply; -1 gives the state before any event

    Returns:
        ReplayState for that point of the hand

    Raises:
        TypeError: If index is not an int
        IndexError: If index is outside [-1, len(events) - 1]
    """
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError(f"Replay index must be an int, got {type(index).__name__}")
    if not -1 <= index < len(events):
        raise IndexError(f"Replay index {index} out of range for {len(events)} events")

    table = _Table(players)
    for i in range(index + 1):
        table.apply(events[i], i)
    return table.snapshot(index)
