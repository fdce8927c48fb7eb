from dataclasses import dataclass
from enum import Enum
from typing import Any

from .money import Cents, from_cents


@dataclass(frozen=True)
class Player:
    """A seat declaration as parsed from the hand header."""
    seat: int
    name: str
    initial_stack: Cents
    hole_cards: tuple[str, ...] | None = None
    is_dealer: bool = False


@dataclass(frozen=True)
class PlayerSnapshot:
    """A player as seen at one point of the replay."""
    seat: int
    name: str
    initial_stack: Cents
    current_stack: Cents
    bet: Cents = 0
    is_active: bool = True
    is_dealer: bool = False
    hole_cards: tuple[str, ...] | None = None
    action: str = ""

    def __str__(self) -> str:
        status = "ACTIVE" if self.is_active else "FOLDED"
        cards = " ".join(self.hole_cards) if self.hole_cards else "??"
        dealer = " (button)" if self.is_dealer else ""
        return (f"Seat {self.seat}: {self.name}{dealer} ${from_cents(self.current_stack):.2f} "
                f"bet=${from_cents(self.bet):.2f} [{cards}] {status} {self.action}").rstrip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "seat": self.seat,
            "name": self.name,
            "initial_stack": from_cents(self.initial_stack),
            "current_stack": from_cents(self.current_stack),
            "bet": from_cents(self.bet),
            "is_active": self.is_active,
            "is_dealer": self.is_dealer,
            "hole_cards": list(self.hole_cards) if self.hole_cards else None,
            "action": self.action,
        }


class Position(str, Enum):
    BUTTON = "BTN"
    SB = "SB"
    BB = "BB"
    EP = "EP"
    MP = "MP"
    CO = "CO"


# Seats clockwise from the button on a 9-max table
POSITIONS_BY_BUTTON_DISTANCE = {
    0: Position.BUTTON,
    1: Position.SB,
    2: Position.BB,
    3: Position.EP,
    4: Position.EP,
    5: Position.MP,
    6: Position.MP,
    7: Position.CO,
    8: Position.CO,
}


def position_for_seat(seat: int, button_seat: int, table_size: int = 9) -> Position:
    """Label a seat by its distance from the button."""
    distance = (seat - button_seat) % table_size
    return POSITIONS_BY_BUTTON_DISTANCE.get(distance, Position.MP)
