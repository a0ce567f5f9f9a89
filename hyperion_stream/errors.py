"""
Exception types raised by the stream and its collaborators.

Every StreamError is terminal: the stream raises at most one and stops.
Rate limiting and cancellation are never reported through these.
"""


class StreamError(Exception):
    """Base class for fatal stream conditions."""


class RequestError(StreamError):
    """Transport failure (connection refused, timeout, malformed request)."""


class HTTPStatusError(StreamError):
    def __init__(self, status: int, url: str):
        super().__init__(f"http error: status={status} url={url}")
        self.status = status
        self.url = url


class DecodeError(StreamError):
    """Malformed response body or unrecognized global_sequence encoding."""


class OrderingViolation(StreamError):
    """The index returned a head below the current cursor."""

    def __init__(self, head: int, lower_bound: int):
        super().__init__(
            f"got actions with global_sequence={head} out of order head={lower_bound}"
        )
        self.head = head
        self.lower_bound = lower_bound


class StateError(Exception):
    """Resume-state file could not be read or written."""
