"""
Timeline entries produced by the hand parser and consumed by the replay
reducer.

Events are immutable: once the parser has emitted one it is never
changed, so the same tuple of events can be replayed any number of times.
"""

from dataclasses import dataclass
from typing import Any

from .enums import ActionType, EventKind, Street
from .money import Cents, from_cents


@dataclass(frozen=True)
class HandEvent:
    """A single entry in a hand's timeline."""
    kind: EventKind
    description: str
    player: str | None = None
    action: ActionType | None = None
    # call/bet: chips added; raise: new total in front; win/uncalled: chips moved
    amount: Cents = 0
    street: Street | None = None
    cards: tuple[str, ...] = ()

    def __str__(self) -> str:
        if self.kind == EventKind.STREET:
            street = self.street.value.upper() if self.street else "?"
            return f"*** {street} *** [{' '.join(self.cards)}]"
        if self.kind == EventKind.SHOWDOWN:
            return "*** SHOWDOWN ***"
        return f"{self.player}: {self.description}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "description": self.description,
            "player": self.player,
            "action": self.action.value if self.action else None,
            "amount": from_cents(self.amount),
            "street": self.street.value if self.street else None,
            "cards": list(self.cards),
        }


def street_index(events: tuple[HandEvent, ...] | list[HandEvent], street: Street | str) -> int | None:
    """
    Locate the timeline position where a street begins.

    Args:
        events: Parsed timeline
        street: Street to look for ("Flop", Street.TURN, ...)

    Returns:
        Index of the street event, 0 for Preflop on a non-empty timeline,
        or None if the hand never reached that street
    """
    street = Street(street)
    if street == Street.PREFLOP:
        return 0 if events else None
    for i, event in enumerate(events):
        if event.kind == EventKind.STREET and event.street == street:
            return i
        if street == Street.SHOWDOWN and event.kind == EventKind.SHOWDOWN:
            return i
    return None


def action_log(events, upto: int | None = None, limit: int | None = None) -> list[str]:
    """Human readable lines for the timeline, optionally cut at an index."""
    selected = events if upto is None else events[:upto + 1]
    lines = []
    for event in selected:
        if event.kind == EventKind.STREET:
            lines.append(f"--- {event.street.value if event.street else '?'} ---")
        elif event.kind == EventKind.SHOWDOWN:
            lines.append("--- Showdown ---")
        else:
            lines.append(f"{event.player}: {event.description}")
    if limit is not None:
        lines = lines[-limit:]
    return lines
