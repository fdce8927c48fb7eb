"""
Hand Parser - turns hand-history text into a roster and an event timeline.

The text comes out of an unreliable transcription step, so every line is
classified independently by pattern and anything unrecognised is dropped.
Nothing in here raises on bad text; the worst case is an empty hand.
"""

import re
from dataclasses import dataclass, replace

from .enums import NEW_CARDS_BY_STREET, ActionType, EventKind, Street
from .events import HandEvent
from .logger import get_logger
from .money import AMOUNT_PATTERN, Cents, parse_amount, parse_amounts
from .player import Player

logger = get_logger(__name__)

SEAT_RE = re.compile(rf"^Seat (\d+): (.+?) \(\s*[$€£]?\s?({AMOUNT_PATTERN})[^)]*\)")
BUTTON_RE = re.compile(r"Seat #(\d+) is the button")
DEALT_RE = re.compile(r"Dealt to (.+?) \[([^\]]+)\]")
MARKER_RE = re.compile(r"\*\*\*\s*(FLOP|TURN|RIVER|SHOWDOWN|SUMMARY)\s*\*\*\*(.*)$", re.IGNORECASE)
BRACKETS_RE = re.compile(r"\[([^\]]*)\]")
BLIND_RE = re.compile(r"^(.+?): posts (small blind|big blind|the ante|ante)\b(.*)$")
UNCALLED_RE = re.compile(r"^Uncalled bet \(([^)]*)\) returned to (.+?)\s*$")
HAND_HEADER_RE = re.compile(r"^(?:PokerStars |Poker )?Hand #", re.MULTILINE)
RAISE_TO_RE = re.compile(rf"\bto\s+([$€£]?\s?(?:{AMOUNT_PATTERN}))")

BLIND_TYPES = {
    "small blind": (ActionType.SMALL_BLIND, "SB"),
    "big blind": (ActionType.BIG_BLIND, "BB"),
    "the ante": (ActionType.ANTE, "Ante"),
    "ante": (ActionType.ANTE, "Ante"),
}

# Checked in this order against the text after "Name:"
ACTION_KEYWORDS = (
    ("folds", ActionType.FOLD),
    ("checks", ActionType.CHECK),
    ("calls", ActionType.CALL),
    ("bets", ActionType.BET),
    ("raises", ActionType.RAISE),
    ("collected", ActionType.WIN),
    ("won", ActionType.WIN),
)

# Bookkeeping line shapes; player names like "Seattle" must not match
IGNORED_LINE_RE = re.compile(r"^(?:Seat \d+:|Seat #\d+|Total pot\b|Board\s*\[|Uncalled bet\b)")


@dataclass(frozen=True)
class ParsedHand:
    """Static roster plus the ordered timeline of one hand."""
    players: tuple[Player, ...] = ()
    events: tuple[HandEvent, ...] = ()

    def player(self, name: str) -> Player | None:
        return next((p for p in self.players if p.name == name), None)

    @property
    def dealer(self) -> Player | None:
        return next((p for p in self.players if p.is_dealer), None)

    @property
    def hero(self) -> Player | None:
        """First seated player whose hole cards are known."""
        return next((p for p in self.players if p.hole_cards), None)


class HandTextParser:
    """
    Line classifier for a single hand-history block.

    Args:
        track_refunds: Emit a refund event for "Uncalled bet ... returned"
            lines instead of ignoring them
    """

    def __init__(self, track_refunds: bool = False):
        self.track_refunds = track_refunds

    def parse(self, raw_text: str) -> ParsedHand:
        if not isinstance(raw_text, str):
            raise TypeError(f"Hand text must be a string, got {type(raw_text).__name__}")

        lines = [line.strip() for line in raw_text.splitlines()]
        players = self._parse_roster(lines)
        events = self._parse_timeline(lines, players)
        logger.debug(f"Parsed {len(players)} players and {len(events)} events")
        return ParsedHand(players=tuple(players), events=tuple(events))

    # --- Header ---

    def _parse_roster(self, lines: list[str]) -> list[Player]:
        players: list[Player] = []
        seats: set[int] = set()
        for line in lines:
            marker = MARKER_RE.search(line)
            if marker and marker.group(1).upper() == "SUMMARY":
                # Summary recaps reuse the seat line shape
                break
            match = SEAT_RE.match(line)
            if not match:
                continue
            seat, name = int(match.group(1)), match.group(2).strip()
            if seat in seats:
                logger.debug(f"Ignoring repeated declaration for seat {seat}: {line!r}")
                continue
            if any(p.name == name for p in players):
                logger.warning(f"Duplicate player name {name!r}; actions will resolve to the first seat")
            seats.add(seat)
            players.append(Player(seat=seat, name=name, initial_stack=parse_amount(match.group(3))))

        button = next((m for m in map(BUTTON_RE.search, lines) if m), None)
        if button:
            button_seat = int(button.group(1))
            players = [replace(p, is_dealer=True) if p.seat == button_seat else p for p in players]

        for line in lines:
            match = DEALT_RE.search(line)
            if not match:
                continue
            name, cards = match.group(1).strip(), tuple(match.group(2).split())
            idx = next((i for i, p in enumerate(players) if p.name == name), None)
            if idx is None:
                logger.debug(f"Dropping hole cards for unseated player {name!r}")
                continue
            players[idx] = replace(players[idx], hole_cards=cards)

        return players

    # --- Timeline ---

    def _parse_timeline(self, lines: list[str], players: list[Player]) -> list[HandEvent]:
        # Longest names first so "Bob Jr" is not read as "Bob"
        names = sorted({p.name for p in players}, key=len, reverse=True)
        street = Street.PREFLOP
        events: list[HandEvent] = []

        for line in lines:
            if not line:
                continue

            marker = MARKER_RE.search(line)
            if marker:
                event = self._street_event(marker.group(1).upper(), marker.group(2))
                if event:
                    events.append(event)
                    street = event.street
                continue

            blind = BLIND_RE.match(line)
            if blind:
                event = self._blind_event(blind, street)
                if event:
                    events.append(event)
                continue

            uncalled = UNCALLED_RE.match(line)
            if uncalled:
                if self.track_refunds:
                    event = self._refund_event(uncalled, street)
                    if event:
                        events.append(event)
                continue

            if IGNORED_LINE_RE.match(line) or "Dealt to" in line:
                continue

            event = self._player_line_event(line, names, street)
            if event:
                events.append(event)
            else:
                logger.debug(f"Skipping unrecognised line: {line!r}")

        return events

    def _street_event(self, marker: str, rest: str) -> HandEvent | None:
        if marker == "SUMMARY":
            return None
        if marker == "SHOWDOWN":
            return HandEvent(kind=EventKind.SHOWDOWN, description="Showdown", street=Street.SHOWDOWN)

        street = Street(marker.capitalize())
        groups = [g.split() for g in BRACKETS_RE.findall(rest)]
        if street == Street.FLOP:
            cards = groups[0] if groups else []
        elif len(groups) >= 2:
            cards = groups[1]
        elif groups and groups[0]:
            # Single group repeating the whole board: only the last card is new
            cards = groups[0][-1:]
        else:
            cards = []

        if len(cards) != NEW_CARDS_BY_STREET[street]:
            logger.debug(f"{street.value} marker revealed {len(cards)} cards: {rest.strip()!r}")
        return HandEvent(
            kind=EventKind.STREET,
            description=f"{street.value} Dealt",
            street=street,
            cards=tuple(cards),
        )

    def _blind_event(self, match: re.Match, street: Street) -> HandEvent | None:
        amount = parse_amount(match.group(3))
        if amount is None:
            return None
        action, label = BLIND_TYPES[match.group(2)]
        return HandEvent(
            kind=EventKind.BLIND,
            description=label,
            player=match.group(1).strip(),
            action=action,
            amount=amount,
            street=street,
        )

    def _refund_event(self, match: re.Match, street: Street) -> HandEvent | None:
        amount = parse_amount(match.group(1))
        if amount is None:
            return None
        return HandEvent(
            kind=EventKind.REFUND,
            description=f"Uncalled bet ({match.group(1).strip()}) returned",
            player=match.group(2),
            action=ActionType.UNCALLED,
            amount=amount,
            street=street,
        )

    def _player_line_event(self, line: str, names: list[str], street: Street) -> HandEvent | None:
        name, text = _split_player_line(line, names)
        if name is None:
            return None

        action = next((a for keyword, a in ACTION_KEYWORDS if keyword in text), None)
        if action is None:
            return None

        amount = _action_amount(action, text)
        return HandEvent(
            kind=EventKind.SUMMARY if action == ActionType.WIN else EventKind.ACTION,
            description=text,
            player=name,
            action=action,
            amount=amount,
            street=street,
        )


def _split_player_line(line: str, names: list[str]) -> tuple[str | None, str]:
    """Match "Name: text", or the colon-less "Name collected/won ..." form."""
    for name in names:
        if line.startswith(f"{name}:"):
            return name, line[len(name) + 1:].strip()
    for name in names:
        rest = line[len(name):]
        if line.startswith(name) and rest.startswith((" collected", " won")):
            return name, rest.strip()
    return None, ""


def _action_amount(action: ActionType, text: str) -> Cents:
    if action in (ActionType.FOLD, ActionType.CHECK):
        return 0
    if action == ActionType.RAISE:
        # "raises $10 to $25" records the total reached, 25
        to_match = RAISE_TO_RE.search(text)
        if to_match:
            return parse_amount(to_match.group(1))
        amounts = parse_amounts(text)
        return amounts[-1] if amounts else 0
    amount = parse_amount(text)
    return amount if amount is not None else 0


def parse_hand(raw_text: str, *, track_refunds: bool = False) -> ParsedHand:
    """
    Parse one hand-history block.

    Args:
        raw_text: Hand text, one event per line
        track_refunds: Keep "Uncalled bet returned" lines as refund events

    Returns:
        ParsedHand with the seated players and the ordered timeline

    Raises:
        TypeError: If raw_text is not a string
    """
    return HandTextParser(track_refunds=track_refunds).parse(raw_text)


def split_hands(text: str) -> list[str]:
    """
    Split a multi-hand export into single hand blocks.

    Hands are cut at "... Hand #" headers when the text has them,
    otherwise at blank lines.
    """
    if not isinstance(text, str):
        raise TypeError(f"Hand text must be a string, got {type(text).__name__}")
    starts = [m.start() for m in HAND_HEADER_RE.finditer(text)]
    if len(starts) > 1:
        bounds = starts + [len(text)]
        if starts[0] > 0 and text[:starts[0]].strip():
            bounds = [0] + bounds
        chunks = [text[a:b] for a, b in zip(bounds, bounds[1:])]
    else:
        chunks = re.split(r"\n\s*\n", text)
    return [chunk.strip() for chunk in chunks if chunk.strip()]
