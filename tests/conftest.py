from pathlib import Path

import pytest

from hhreplay.engine.game_state import compute_replay_state
from hhreplay.engine.hand_parser import parse_hand

HANDS_DIR = Path(__file__).parent / "data" / "hands"


@pytest.fixture
def hand_text():
    def _load(name: str) -> str:
        return (HANDS_DIR / f"{name}.txt").read_text(encoding="utf-8")
    return _load


@pytest.fixture
def parsed_hand(hand_text):
    def _parse(name: str, track_refunds: bool = False):
        return parse_hand(hand_text(name), track_refunds=track_refunds)
    return _parse


@pytest.fixture
def replay_named_hand(parsed_hand):
    """Parse a sample hand and return every state from -1 through the last event."""
    def _replay(name: str, track_refunds: bool = False):
        hand = parsed_hand(name, track_refunds=track_refunds)
        states = [compute_replay_state(hand.players, hand.events, i)
                  for i in range(-1, len(hand.events))]
        return hand, states
    return _replay
