"""
Playback driver for the replayer.

ReplayCursor holds nothing but an index into a parsed hand; every state it
hands out is recomputed from scratch, so stepping, seeking and jumping can
happen in any order without stale state.
"""

from typing import Iterator

from .enums import Street
from .events import street_index
from .game_state import ReplayState, compute_replay_state
from .hand_parser import ParsedHand


class ReplayCursor:
    """
    Scrubbable position within one hand.

    The cursor starts on the first event (or -1 for a hand without events),
    matching what a replayer shows when a hand is opened.
    """

    def __init__(self, hand: ParsedHand, index: int | None = None):
        self.hand = hand
        self._index = self.first_index
        if index is not None:
            self.seek(index)

    def __len__(self) -> int:
        return len(self.hand.events)

    @property
    def first_index(self) -> int:
        return 0 if self.hand.events else -1

    @property
    def last_index(self) -> int:
        return len(self.hand.events) - 1

    @property
    def index(self) -> int:
        return self._index

    @property
    def at_end(self) -> bool:
        return self._index >= self.last_index

    @property
    def state(self) -> ReplayState:
        return compute_replay_state(self.hand.players, self.hand.events, self._index)

    def seek(self, index: int) -> ReplayState:
        """Move to an index, clamped to the timeline."""
        self._index = max(self.first_index, min(index, self.last_index))
        return self.state

    def step_forward(self) -> ReplayState:
        return self.seek(self._index + 1)

    def step_back(self) -> ReplayState:
        return self.seek(self._index - 1)

    def reset(self) -> ReplayState:
        return self.seek(self.first_index)

    def jump_to_street(self, street: Street | str) -> ReplayState | None:
        """Seek to where a street starts; None (cursor unmoved) if never reached."""
        idx = street_index(self.hand.events, street)
        if idx is None:
            return None
        return self.seek(idx)

    def play(self) -> Iterator[ReplayState]:
        """Yield the current state and every following one until the end."""
        yield self.state
        while not self.at_end:
            yield self.step_forward()
