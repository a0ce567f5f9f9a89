"""
Stream Hyperion actions to stdout, one JSON `act` object per line.

Usage:
    # Follow buyrambytes calls from the saved head (or from the start)
    hyperion-stream --filter 'account=eosio&act.name=buyrambytes'

    # Different endpoint and state file, slower idle polling
    hyperion-stream --endpoint https://wax.eosusa.io \\
        --state-file data/ram.state --sleep-time-base 60 \\
        --filter 'act.name=buyrambytes'

Every flag defaults to its environment variable (see config.py).
The saved head is updated after each batch is written, so a restart
redelivers at most the last page.
"""

import argparse
import signal
import sys
import threading
from typing import Optional, Sequence

from hyperion_stream import config
from hyperion_stream.errors import StateError, StreamError
from hyperion_stream.filters import parse_filters
from hyperion_stream.state import StateFile
from hyperion_stream.streamer import Streamer
from hyperion_stream.utils import logging as log

MIN_SLEEP_TIME_BASE = 1.0  # seconds


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Stream Hyperion actions to stdout")
    parser.add_argument("--endpoint", default=config.HYPERION_ENDPOINT,
                        help="Hyperion endpoint")
    parser.add_argument("--state-file", default=config.STATE_FILE,
                        help="State file")
    parser.add_argument("--sleep-time-base", type=float, default=config.SLEEP_TIME_BASE_SECONDS,
                        help="Base sleep time in seconds for the caught-up backoff")
    parser.add_argument("--filter", default=config.HYPERION_FILTER,
                        help="URL-encoded filters for get_actions, "
                             "e.g. 'account=eosio&act.name=buyrambytes'")
    parser.add_argument("--page-limit", type=int, default=config.PAGE_LIMIT,
                        help="Actions per request")
    return parser.parse_args(argv)


def install_signal_handlers(cancel: threading.Event) -> None:
    def _handle(signum, frame):
        log.info("signal_received", signal=signal.Signals(signum).name)
        cancel.set()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def run(args: argparse.Namespace, cancel: threading.Event, out=None) -> None:
    """Stream until cancelled. Raises on startup or stream failure."""
    if out is None:
        out = sys.stdout

    state_file = StateFile(args.state_file)
    state = state_file.load()
    log.info("booting_from", global_sequence=state.head_global_sequence)

    if args.sleep_time_base < MIN_SLEEP_TIME_BASE:
        raise ValueError(f"sleep-time-base must be at least {MIN_SLEEP_TIME_BASE:g}s")

    filters = parse_filters(args.filter)
    if not filters:
        raise ValueError("at least one filter is required")

    streamer = Streamer(
        args.endpoint,
        page_limit=args.page_limit,
        sleep_base=args.sleep_time_base,
        rate_limit_wait=config.RATE_LIMIT_WAIT_SECONDS,
        request_timeout=config.REQUEST_TIMEOUT_SECONDS,
    )

    last_logged_block = 0
    with streamer:
        for batch in streamer.stream(state.head_global_sequence, filters, cancel):
            for payload in batch.actions:
                out.write(payload.decode("utf-8") + "\n")
            out.flush()

            state.head_global_sequence = batch.head_global_sequence
            state_file.store(state)

            if batch.head_block - last_logged_block > config.PROGRESS_LOG_BLOCKS:
                log.info("current_height", block_num=batch.head_block,
                         global_sequence=batch.head_global_sequence)
                last_logged_block = batch.head_block


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    cancel = threading.Event()
    install_signal_handlers(cancel)

    try:
        run(args, cancel)
    except ValueError as e:
        log.error("startup_failed", err=str(e))
        return 1
    except StateError as e:
        log.error("state_failed", err=str(e))
        return 1
    except StreamError as e:
        log.error("stream_stopped", err=str(e), kind=type(e).__name__)
        return 1
    except BrokenPipeError as e:
        # reader went away (e.g. `| head`); the saved head still marks the last full batch
        log.error("output_closed", err=str(e))
        return 1

    log.info("shutdown")
    return 0


if __name__ == "__main__":
    sys.exit(main())
