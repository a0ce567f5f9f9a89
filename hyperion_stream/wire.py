"""
Hyperion get_actions wire format: query construction and response decoding.

Request:
    GET <base>/v2/history/get_actions
        ?sort=asc&limit=<n>&global_sequence=<lower+1>-<upper>&<filters...>

Response (fields we read):
    {
      "query_time_ms": 12.3,
      "cached": false,
      "last_indexed_block": 123,
      "total": {"value": 10000, "relation": "gte"},
      "actions": [{"block_num": 10, "global_sequence": "100", "act": {...}}, ...]
    }

global_sequence arrives either as a decimal string or as a JSON number,
depending on the Hyperion version serving the request.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Optional, Tuple

import orjson

from hyperion_stream.errors import DecodeError
from hyperion_stream.models import Action, Cursor, Filter, UINT32_MAX, UINT64_MAX

ACTIONS_PATH = "/v2/history/get_actions"
DEFAULT_PAGE_LIMIT = 100

# Open end of the global_sequence range as Hyperion expects it (max int64)
UNBOUNDED_WIRE = str(2**63 - 1)


def actions_url(base_url: str) -> str:
    return base_url.rstrip("/") + ACTIONS_PATH


def build_query(
    cursor: Cursor, limit: Optional[int], filters: Iterable[Filter]
) -> List[Tuple[str, str]]:
    """
    Compose get_actions query parameters for the range after cursor.

    Returned as ordered pairs so requests encodes them in this order.
    """
    if not limit:
        limit = DEFAULT_PAGE_LIMIT

    upper = UNBOUNDED_WIRE if cursor.is_unbounded else str(cursor.upper_bound)
    params = [
        ("sort", "asc"),
        ("limit", str(limit)),
        ("global_sequence", f"{cursor.lower_bound + 1}-{upper}"),
    ]
    params.extend((f.key, f.value) for f in filters)
    return params


@dataclass
class Page:
    actions: List[Action] = field(default_factory=list)
    query_time_ms: Optional[float] = None
    cached: Optional[bool] = None
    last_indexed_block: Optional[int] = None
    total_value: Optional[int] = None
    total_relation: Optional[str] = None


def decode_global_sequence(value: Any) -> int:
    """
    Normalize a wire global_sequence to an unsigned 64-bit int.

    Accepts a decimal string or a JSON number (fractions truncate toward
    zero). Anything else raises DecodeError.
    """
    # bool is an int subclass; JSON true/false is not a sequence number
    if isinstance(value, bool):
        raise DecodeError(f"unexpected type for global_sequence: {type(value).__name__}")

    if isinstance(value, str):
        if not (value.isascii() and value.isdigit()):
            raise DecodeError(f"parse global sequence: invalid syntax {value!r}")
        result = int(value)
    elif isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if not math.isfinite(value) or value < 0:
            raise DecodeError(f"parse global sequence: out of range {value!r}")
        result = math.trunc(value)
    else:
        raise DecodeError(f"unexpected type for global_sequence: {type(value).__name__}")

    if not 0 <= result <= UINT64_MAX:
        raise DecodeError(f"parse global sequence: out of range {value!r}")
    return result


def _decode_block_num(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= UINT32_MAX:
        raise DecodeError(f"invalid block_num: {value!r}")
    return value


# Raw-value scanner. Only run over bodies orjson has already accepted, so it
# can assume well-formed JSON and just track spans.

_WS = b" \t\r\n"
_VALUE_END = b",}]" + _WS


def _skip_ws(buf: bytes, i: int) -> int:
    while i < len(buf) and buf[i] in _WS:
        i += 1
    return i


def _skip_string(buf: bytes, i: int) -> int:
    i += 1
    while True:
        c = buf[i]
        if c == 0x5C:  # backslash
            i += 2
        elif c == 0x22:  # quote
            return i + 1
        else:
            i += 1


def _skip_value(buf: bytes, i: int) -> int:
    c = buf[i]
    if c == 0x22:
        return _skip_string(buf, i)
    if c in b"{[":
        depth = 0
        while True:
            c = buf[i]
            if c == 0x22:
                i = _skip_string(buf, i)
                continue
            if c in b"{[":
                depth += 1
            elif c in b"}]":
                depth -= 1
                if depth == 0:
                    return i + 1
            i += 1
    # number or literal
    while i < len(buf) and buf[i] not in _VALUE_END:
        i += 1
    return i


def _members(buf: bytes, i: int) -> Iterator[Tuple[str, int, int]]:
    """Yield (key, start, end) for each member of the object at buf[i]."""
    i = _skip_ws(buf, i + 1)
    if buf[i] == ord("}"):
        return
    while True:
        key_end = _skip_string(buf, i)
        key = orjson.loads(buf[i:key_end])
        start = _skip_ws(buf, _skip_ws(buf, key_end) + 1)
        end = _skip_value(buf, start)
        yield key, start, end
        i = _skip_ws(buf, end)
        if buf[i] == ord("}"):
            return
        i = _skip_ws(buf, i + 1)


def _elements(buf: bytes, i: int) -> Iterator[int]:
    """Yield the start offset of each element of the array at buf[i]."""
    i = _skip_ws(buf, i + 1)
    if buf[i] == ord("]"):
        return
    while True:
        yield i
        i = _skip_ws(buf, _skip_value(buf, i))
        if buf[i] == ord("]"):
            return
        i = _skip_ws(buf, i + 1)


def _raw_acts(body: bytes) -> List[bytes]:
    """
    The `act` value of every action, sliced verbatim out of body.

    Payloads reach the consumer exactly as the index sent them, with no
    re-encoding.
    """
    actions_start = None
    for key, start, _ in _members(body, _skip_ws(body, 0)):
        if key == "actions":
            actions_start = start  # last duplicate wins, as in orjson
    if actions_start is None or body[actions_start] != ord("["):
        return []

    acts = []
    for element in _elements(body, actions_start):
        act = b"null"
        for key, start, end in _members(body, element):
            if key == "act":
                act = body[start:end]
        acts.append(act)
    return acts


def _decode_action(raw: dict, payload: bytes) -> Action:
    return Action(
        global_sequence=decode_global_sequence(raw.get("global_sequence")),
        block_num=_decode_block_num(raw.get("block_num")),
        payload=payload,
    )


def parse_page(body: bytes) -> Page:
    """Decode a get_actions response body. Actions keep response order."""
    body = bytes(body)
    try:
        doc = orjson.loads(body)
    except orjson.JSONDecodeError as e:
        raise DecodeError(f"decode body: {e}") from e

    if not isinstance(doc, dict):
        raise DecodeError(f"decode body: expected object, got {type(doc).__name__}")

    raw_actions = doc.get("actions")
    if raw_actions is None:
        raw_actions = []
    elif not isinstance(raw_actions, list):
        raise DecodeError(f"decode body: actions is {type(raw_actions).__name__}")

    # the scanner below walks action members, so every element must be an object
    for raw in raw_actions:
        if not isinstance(raw, dict):
            raise DecodeError(f"action is not an object: {type(raw).__name__}")

    payloads = _raw_acts(body) if raw_actions else []
    total = doc.get("total") if isinstance(doc.get("total"), dict) else {}
    return Page(
        actions=[_decode_action(raw, p) for raw, p in zip(raw_actions, payloads)],
        query_time_ms=doc.get("query_time_ms"),
        cached=doc.get("cached"),
        last_indexed_block=doc.get("last_indexed_block"),
        total_value=total.get("value"),
        total_relation=total.get("relation"),
    )
