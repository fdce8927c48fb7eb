from enum import Enum


class EventKind(str, Enum):
    BLIND = "blind"
    ACTION = "action"
    STREET = "street"
    SHOWDOWN = "showdown"
    SUMMARY = "summary"
    REFUND = "refund"


class ActionType(str, Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    RAISE = "raise"
    WIN = "win"
    SMALL_BLIND = "small_blind"
    BIG_BLIND = "big_blind"
    ANTE = "ante"
    UNCALLED = "uncalled"


class Street(str, Enum):
    PREFLOP = "Preflop"
    FLOP = "Flop"
    TURN = "Turn"
    RIVER = "River"
    SHOWDOWN = "Showdown"


# Number of new board cards each street marker reveals
NEW_CARDS_BY_STREET = {
    Street.FLOP: 3,
    Street.TURN: 1,
    Street.RIVER: 1,
}
