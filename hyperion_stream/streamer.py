"""
Hyperion action streamer.

Polls get_actions for everything after a global_sequence cursor and yields
pages as Batch objects with strictly increasing heads. When the index has
nothing new the poll interval grows quadratically; a 429 waits a fixed
interval and retries the same range.

Usage:
    streamer = Streamer("https://wax.greymass.com", page_limit=1000)
    cancel = threading.Event()
    for batch in streamer.stream(state.head_global_sequence, filters, cancel):
        ...

The generator ends without error when cancel is set, and raises exactly one
StreamError subclass on fatal conditions.
"""

import threading
from typing import Iterable, Iterator, Optional

import requests

from hyperion_stream.backoff import DEFAULT_BASE, Backoff, wait
from hyperion_stream.errors import HTTPStatusError, RequestError
from hyperion_stream.models import Batch, Cursor, Filter
from hyperion_stream.utils import logging as log
from hyperion_stream.wire import actions_url, build_query, parse_page

RATE_LIMIT_WAIT = 20.0  # seconds


class Streamer:
    def __init__(
        self,
        base_url: str,
        page_limit: Optional[int] = None,
        sleep_base: float = DEFAULT_BASE,
        rate_limit_wait: float = RATE_LIMIT_WAIT,
        request_timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.page_limit = page_limit
        self.sleep_base = sleep_base
        self.rate_limit_wait = rate_limit_wait
        self.request_timeout = request_timeout
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "Streamer":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def stream(
        self,
        start: int,
        filters: Iterable[Filter],
        cancel: Optional[threading.Event] = None,
    ) -> Iterator[Batch]:
        """Yield batches for global sequences after start until cancelled."""
        if cancel is None:
            cancel = threading.Event()
        filters = tuple(filters)
        url = actions_url(self.base_url)
        cursor = Cursor(start)
        backoff = Backoff(self.sleep_base)

        while True:
            if cancel.is_set():
                return

            params = build_query(cursor, self.page_limit, filters)
            try:
                response = self.session.get(url, params=params, timeout=self.request_timeout)
            except requests.RequestException as e:
                if cancel.is_set():
                    return
                raise RequestError(f"http request: {e}") from e

            if response.status_code == 429:
                response.close()
                log.info("rate_limited", wait=self.rate_limit_wait, global_sequence=cursor.lower_bound)
                if not wait(cancel, self.rate_limit_wait):
                    return
                continue

            if response.status_code >= 400:
                response.close()
                raise HTTPStatusError(response.status_code, response.url)

            page = parse_page(response.content)
            log.debug(
                "page_fetched",
                actions=len(page.actions),
                last_indexed_block=page.last_indexed_block,
                query_time_ms=page.query_time_ms,
                cached=page.cached,
                total=page.total_value,
                total_relation=page.total_relation,
            )

            batch = Batch.from_actions(page.actions)
            if batch is None or batch.head_global_sequence == cursor.lower_bound:
                # all caught up
                seconds = backoff.caught_up()
                log.info(
                    "caught_up",
                    wait=seconds,
                    waits=backoff.count,
                    global_sequence=cursor.lower_bound,
                )
                if not wait(cancel, seconds):
                    return
                continue

            # raises OrderingViolation if the index went backwards
            cursor = cursor.advance(batch.head_global_sequence)
            backoff.reset()

            if cancel.is_set():
                return
            yield batch
