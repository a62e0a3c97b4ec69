# src/pollwatch/cli/main.py

"""
CLI entrypoint.

Watches a URL until it answers with an expected status code:
initializes logging, builds the HTTP status task and a Poller,
prints lifecycle events and maps the outcome to an exit status.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from typing import Sequence

import httpx

from ..checks.http_status import http_status_task
from ..config import Settings, get_settings
from ..core.models import Channel, TrackingTime
from ..core.poller import Poller
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pollwatch",
        description="Poll a URL until it returns an expected HTTP status or the timeout elapses.",
    )
    parser.add_argument("url", help="URL to GET on every attempt")
    parser.add_argument(
        "--expect",
        type=int,
        action="append",
        metavar="CODE",
        help=f"accepted status code, repeatable (default: {settings.expect_status})",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=settings.delay_seconds,
        help="seconds between attempts (default: %(default)s)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.timeout_seconds,
        help="overall time limit in seconds (default: %(default)s)",
    )
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=settings.http_timeout_seconds,
        help="per-request timeout in seconds (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="console log level (default: %(default)s)",
    )
    return parser


async def watch(
    url: str,
    *,
    expect: Sequence[int],
    delay: float,
    timeout: float,
    request_timeout: float = 5.0,
    client: httpx.AsyncClient | None = None,
    quiet: bool = False,
) -> int:
    """Run one polling cycle against `url` and return the exit status."""
    task = http_status_task(url, expect=expect, request_timeout=request_timeout, client=client)
    poller: Poller[int] = Poller(task, delay=delay, timeout=timeout)

    closed = asyncio.Event()
    outcome: dict[str, int | None] = {"status": None}

    def on_success(status: int) -> None:
        outcome["status"] = status

    poller.subscribe(Channel.SUCCESS, on_success)
    poller.subscribe(Channel.CLOSE, closed.set)

    if not quiet:
        def on_start(t: TrackingTime) -> None:
            _print_ts(f"Watching {url} (expect={list(expect)}, timeout={t.remaining}s)")

        def on_second(t: TrackingTime) -> None:
            _print_ts(f"... {t.passed}s passed, {t.remaining}s remaining")

        def on_error(exc: BaseException) -> None:
            _print_ts(f"Attempt failed: {exc!r}")

        poller.subscribe(Channel.START, on_start)
        poller.subscribe(Channel.SECOND, on_second)
        poller.subscribe(Channel.ERROR, on_error)
        poller.subscribe(Channel.SUCCESS, lambda status: _print_ts(f"OK: {url} answered {status}"))
        poller.subscribe(Channel.TIMEOUT, lambda: _print_ts(f"Timed out after {timeout}s"))

    poller.start()
    try:
        await closed.wait()
    finally:
        poller.destroy()

    return EXIT_OK if outcome["status"] is not None else EXIT_FAILED


def main(argv: Sequence[str] | None = None) -> int:
    settings = get_settings()
    args = build_parser(settings).parse_args(argv)

    console_level = getattr(logging, str(args.log_level).upper(), logging.INFO)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    try:
        return asyncio.run(
            watch(
                args.url,
                expect=args.expect or settings.expect_status,
                delay=args.delay,
                timeout=args.timeout,
                request_timeout=args.request_timeout,
            )
        )
    except ValueError as exc:
        # Invalid delay/timeout/expect values.
        logger.error("%s", exc)
        return 2
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        return EXIT_FAILED


def main_entry() -> None:
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
