from unittest.mock import MagicMock

import orjson
import pytest

BASE_URL = "https://hyperion.test"
UNBOUNDED = "9223372036854775807"


class FakeCancel:
    """
    Stand-in for threading.Event that records wait timeouts instead of sleeping.

    cancel_after_waits: set the flag once this many waits have been recorded.
    """

    def __init__(self, cancel_after_waits=None):
        self.waits = []
        self.cancel_after_waits = cancel_after_waits
        self._flag = False

    def is_set(self):
        return self._flag

    def set(self):
        self._flag = True

    def wait(self, timeout=None):
        self.waits.append(timeout)
        if self.cancel_after_waits is not None and len(self.waits) >= self.cancel_after_waits:
            self._flag = True
        return self._flag


def make_page(*actions, last_indexed_block=1000):
    """actions: (global_sequence, block_num) pairs."""
    return {
        "query_time_ms": 3.2,
        "cached": False,
        "last_indexed_block": last_indexed_block,
        "total": {"value": len(actions), "relation": "eq"},
        "actions": [
            {"block_num": block, "global_sequence": seq, "act": {"name": f"act{seq}"}}
            for seq, block in actions
        ],
    }


def make_response(status=200, body=None):
    resp = MagicMock()
    resp.status_code = status
    if isinstance(body, bytes):
        resp.content = body
    else:
        resp.content = orjson.dumps(body if body is not None else {})
    resp.url = f"{BASE_URL}/v2/history/get_actions"
    return resp


@pytest.fixture
def session():
    return MagicMock()
