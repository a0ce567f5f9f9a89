"""
Value types shared by the query builder, the parser and the streamer.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from hyperion_stream.errors import OrderingViolation

UINT64_MAX = 2**64 - 1
UINT32_MAX = 2**32 - 1


@dataclass(frozen=True)
class Filter:
    """One key/value term appended verbatim to the get_actions query."""
    key: str
    value: str


@dataclass(frozen=True)
class Cursor:
    """
    Range of global sequences still to fetch.

    lower_bound is the highest global sequence already delivered; the next
    query starts at lower_bound + 1. upper_bound None means unbounded.
    """
    lower_bound: int = 0
    upper_bound: Optional[int] = None

    @property
    def is_unbounded(self) -> bool:
        return self.upper_bound is None

    def advance(self, head: int) -> "Cursor":
        """Move the lower bound forward to head. Never moves backwards."""
        if head < self.lower_bound:
            raise OrderingViolation(head, self.lower_bound)
        return Cursor(head, self.upper_bound)


@dataclass(frozen=True)
class Action:
    global_sequence: int
    block_num: int
    payload: bytes  # the `act` object as compact JSON, opaque to the stream


@dataclass(frozen=True)
class Batch:
    """Actions from one page, tagged with the highest global sequence seen."""
    head_global_sequence: int
    head_block: int
    actions: tuple[bytes, ...]

    @classmethod
    def from_actions(cls, actions: Sequence[Action]) -> Optional["Batch"]:
        """Build a batch in response order, or None for an empty page."""
        if not actions:
            return None

        head = actions[0]
        for action in actions[1:]:
            if action.global_sequence > head.global_sequence:
                head = action

        return cls(
            head_global_sequence=head.global_sequence,
            head_block=head.block_num,
            actions=tuple(a.payload for a in actions),
        )
