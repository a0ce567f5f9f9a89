"""
Wait policy for caught-up polling and rate limiting.
"""

import threading

MAX_WAITS = 10
MIN_BASE = 0.01      # seconds; anything smaller is treated as unset
DEFAULT_BASE = 1.0   # seconds


class Backoff:
    """
    Quadratic backoff over consecutive caught-up cycles.

    Each caught_up() call bumps the counter (saturating at MAX_WAITS) and
    returns count**2 * base seconds. reset() is called on forward progress.
    """

    def __init__(self, base: float = DEFAULT_BASE):
        if base < MIN_BASE:
            base = DEFAULT_BASE
        self.base = base
        self.count = 0

    def caught_up(self) -> float:
        self.count = min(self.count + 1, MAX_WAITS)
        return self.count * self.count * self.base

    def reset(self) -> None:
        self.count = 0


def wait(cancel: threading.Event, seconds: float) -> bool:
    """Sleep for seconds unless cancelled. Returns False if cancelled."""
    return not cancel.wait(seconds)
