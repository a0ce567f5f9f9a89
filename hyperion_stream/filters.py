"""
Build get_actions filters from a URL-encoded query string.

    parse_filters("account=eosio&act.name=buyrambytes")
    -> (Filter("account", "eosio"), Filter("act.name", "buyrambytes"))
"""

from urllib.parse import parse_qsl

from hyperion_stream.models import Filter


def parse_filters(query: str) -> tuple[Filter, ...]:
    """Parse query into filters, one value per key, in order of appearance."""
    seen: dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key in seen:
            raise ValueError(f"{key!r} contains multiple values, only one is allowed")
        seen[key] = value
    return tuple(Filter(key, value) for key, value in seen.items())
